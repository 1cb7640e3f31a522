from django.db import models
from .approvable import ApprovableModel
from .project import Project

TASK_STATUS_CHOICES = [
    ("todo", "To do"),
    ("in-progress", "In progress"),
    ("done", "Done"),
]


class Task(ApprovableModel):  # Site to-do item
    project = models.ForeignKey(Project, on_delete=models.CASCADE, related_name="tasks")
    title = models.CharField(max_length=200)
    description = models.TextField(null=True, blank=True)
    status = models.CharField(max_length=20, choices=TASK_STATUS_CHOICES, default="todo")
    due_date = models.DateField(null=True, blank=True)

    class Meta:
        indexes = [models.Index(fields=["organization", "approval_status"], name="task_org_status_idx")]

    def __str__(self):
        return self.title
