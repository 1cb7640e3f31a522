from django.urls import path

from . import views

app_name = "construction_core"

urlpatterns = [
    path("resources/<str:module>/", views.resource_collection, name="resource-collection"),
    path("resources/<str:module>/<int:pk>/", views.resource_detail, name="resource-detail"),
    path("approvals/", views.approvals, name="approvals"),
    path("records/<int:pk>/settlements/", views.record_settlements, name="record-settlements"),
    path("projects/", views.projects, name="projects"),
    path("projects/<int:pk>/", views.project_detail, name="project-detail"),
    path("projects/<int:pk>/assignments/", views.project_assignments, name="project-assignments"),
    path("labors/", views.labors, name="labors"),
    path("labors/<int:pk>/", views.labor_detail, name="labor-detail"),
    path("financial-accounts/", views.financial_accounts, name="financial-accounts"),
    path(
        "financial-accounts/<int:pk>/",
        views.financial_account_detail,
        name="financial-account-detail",
    ),
    path("notifications/",views.notifications, name="notifications"),
    path("notifications/<int:pk>/", views.notification_detail, name="notification-detail"),
    path("audit-logs/", views.audit_logs, name="audit-logs"),
    path("invites/", views.invites, name="invites"),
    # before <pk>/ so "accept" is never read as an id
    path("invites/accept/", views.invite_accept, name="invite-accept"),
    path("invites/<int:pk>/", views.invite_detail, name="invite-detail"),
]
