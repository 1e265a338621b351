from teamsite.models.fields import ApiModel


class UploadResult(ApiModel):
    filename: str
    original_name: str
    path: str
    size: int
    mimetype: str
