"""Firestore collection names (schema-in-code).

Firestore has no DDL or migrations. Collections are created automatically
when the first document is written; these constants keep names consistent.
"""

# Identity & RBAC
COLLECTION_USERS = "users"
COLLECTION_ROLES = "roles"
COLLECTION_USER_ROLES = "user_roles"

# Workflow configuration
COLLECTION_WORKFLOW_STATUSES = "workflow_statuses"
COLLECTION_WORKFLOW_TRIGGERS = "workflow_triggers"

# Trigger execution bookkeeping
COLLECTION_TRIGGER_RUNS = "workflow_trigger_runs"
COLLECTION_DEAD_LETTERS = "workflow_dead_letters"

# Domain entities touched by automation
COLLECTION_WORK_ORDERS = "work_orders"
COLLECTION_CUSTOMERS = "customers"
COLLECTION_INVOICES = "invoices"
COLLECTION_NOTIFICATIONS = "notifications"
