from .approval import (create_resource, delete_resource, edit_resource,
                       get_resource, list_pending, list_resources,
                       resolve_approval)
from .audit_helper import log_action, recent_logs
from .balances import ledger_summary, material_stock
from .invites import accept_invite, create_invite, list_invites, revoke_invite
from .masters import (create_financial_account, create_labor, delete_labor,
                      list_financial_accounts, list_labors,
                      update_financial_account, update_labor)
from .notifications import (delete_notification, enqueue_on_commit,
                            list_notifications, mark_all_read, mark_read,
                            notify, notify_admins)
from .projects import (accessible_projects, assign_user, create_project,
                       delete_project, get_member, get_project,
                       list_assignments, update_project)
from .settlement import add_settlement, list_settlements
