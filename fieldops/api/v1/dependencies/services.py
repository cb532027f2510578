"""Application service dependencies (composition root)."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends

from fieldops.application.interfaces.services import IStatusChangeDispatcher
from fieldops.application.services.dead_letter_service import DeadLetterService
from fieldops.application.services.role_service import RoleService
from fieldops.application.services.work_order_service import WorkOrderService
from fieldops.application.services.workflow_status_service import WorkflowStatusService
from fieldops.application.services.workflow_trigger_service import WorkflowTriggerService
from fieldops.infrastructure.firebase.repositories import (
    FirestoreCustomerRepository,
    FirestoreDeadLetterRepository,
    FirestoreProfileRepository,
    FirestoreRoleRepository,
    FirestoreUserRoleRepository,
    FirestoreWorkflowStatusRepository,
    FirestoreWorkflowTriggerRepository,
    FirestoreWorkOrderRepository,
)

from .stores import (
    get_customer_repo,
    get_dead_letter_repo,
    get_profile_repo,
    get_role_repo,
    get_trigger_dispatcher,
    get_user_role_repo,
    get_work_order_repo,
    get_workflow_status_repo,
    get_workflow_trigger_repo,
)


def get_role_service(
    role_repo: Annotated[FirestoreRoleRepository, Depends(get_role_repo)],
    user_role_repo: Annotated[FirestoreUserRoleRepository, Depends(get_user_role_repo)],
    profile_repo: Annotated[FirestoreProfileRepository, Depends(get_profile_repo)],
) -> RoleService:
    return RoleService(role_repo, user_role_repo, profile_repo)


def get_workflow_status_service(
    status_repo: Annotated[FirestoreWorkflowStatusRepository, Depends(get_workflow_status_repo)],
    trigger_repo: Annotated[FirestoreWorkflowTriggerRepository, Depends(get_workflow_trigger_repo)],
    work_order_repo: Annotated[FirestoreWorkOrderRepository, Depends(get_work_order_repo)],
) -> WorkflowStatusService:
    return WorkflowStatusService(status_repo, trigger_repo, work_order_repo)


def get_workflow_trigger_service(
    trigger_repo: Annotated[FirestoreWorkflowTriggerRepository, Depends(get_workflow_trigger_repo)],
    status_service: Annotated[WorkflowStatusService, Depends(get_workflow_status_service)],
) -> WorkflowTriggerService:
    return WorkflowTriggerService(trigger_repo, status_service)


def get_work_order_service(
    work_order_repo: Annotated[FirestoreWorkOrderRepository, Depends(get_work_order_repo)],
    status_service: Annotated[WorkflowStatusService, Depends(get_workflow_status_service)],
    dispatcher: Annotated[IStatusChangeDispatcher, Depends(get_trigger_dispatcher)],
    customer_repo: Annotated[FirestoreCustomerRepository, Depends(get_customer_repo)],
    dead_letter_repo: Annotated[FirestoreDeadLetterRepository, Depends(get_dead_letter_repo)],
) -> WorkOrderService:
    return WorkOrderService(
        work_order_repo, status_service, dispatcher, customer_repo, dead_letter_repo
    )


def get_dead_letter_service(
    dead_letter_repo: Annotated[FirestoreDeadLetterRepository, Depends(get_dead_letter_repo)],
    dispatcher: Annotated[IStatusChangeDispatcher, Depends(get_trigger_dispatcher)],
) -> DeadLetterService:
    return DeadLetterService(dead_letter_repo, dispatcher)
