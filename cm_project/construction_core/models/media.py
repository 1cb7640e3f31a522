from django.db import models
from .approvable import ApprovableModel
from .project import Project


# Files live in object storage, only their URLs are stored here
class Photo(ApprovableModel):
    project = models.ForeignKey(Project, on_delete=models.CASCADE, related_name="photos")
    image_url = models.URLField(max_length=500)
    description = models.TextField(null=True, blank=True)

    def __str__(self):
        return self.image_url


class Document(ApprovableModel):
    project = models.ForeignKey(
        Project, on_delete=models.CASCADE, related_name="documents"
    )
    document_url = models.URLField(max_length=500)
    document_name = models.CharField(max_length=255)
    description = models.TextField(null=True, blank=True)

    def __str__(self):
        return self.document_name
