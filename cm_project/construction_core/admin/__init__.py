from .actions import approve_selected, reject_selected
from .auditlog import AuditLogAdmin
from .forms import UserAdminChangeForm, UserAdminCreationForm
from .inlines import ProjectAssignmentInline, RecordSettlementInline
from .membership import InviteAdmin, MembershipAdmin, OrganizationAdmin, UserAdmin
from .mixins import TenantAdminMixin
from .project import FinancialAccountAdmin, LaborAdmin, NotificationAdmin, ProjectAdmin
from .resources import (ApprovableAdmin, DocumentAdmin, HajariAdmin, LedgerAdmin,
                        MaterialAdmin, MaterialLedgerEntryAdmin, PhotoAdmin,
                        RecordAdmin, TaskAdmin, TransactionAdmin)
