from .approvable import (APPROVAL_STATUS_CHOICES, APPROVED, PENDING_CREATE,
                         PENDING_DELETE, PENDING_EDIT, REJECTED,
                         ApprovableModel)
from .auditlog import AuditLog
from .invite import Invite
from .labor import Hajari, Labor
from .ledger import Ledger, Transaction
from .material import Material, MaterialLedgerEntry
from .media import Document, Photo
from .notification import Notification
from .organization import Membership, Organization, User
from .project import FinancialAccount, Project, ProjectAssignment
from .record import Record, RecordSettlement, settlement_status
from .task import Task
