"""FastAPI routes for the Identity domain.

Registration is called by the identity provider's sign-up hook, so it is
an admin (service) route; profile routes act on the calling user.
"""

from fastapi import APIRouter, BackgroundTasks, Depends

from identity.api.schemas import RegisterUserRequest, UpdateProfileRequest
from identity.auth import CurrentUser, get_current_user, require_admin
from identity.user.registration import RegisterUser, UpdateProfile, UserRegistrationHandler
from identity.user.user import UserRepository
from notifications.notification.dispatch import run_notification_task

# ---------------------------------------------------------------------------
# Admin Router
# ---------------------------------------------------------------------------
admin_user_router = APIRouter(prefix="/admin/users", tags=["admin"], dependencies=[Depends(require_admin)])


@admin_user_router.post("", status_code=201)
async def register_user(body: RegisterUserRequest, background_tasks: BackgroundTasks) -> dict:
    user, notification = UserRegistrationHandler().register_user(RegisterUser(**body.model_dump()))
    if notification is not None:
        background_tasks.add_task(run_notification_task, notification.id)
    return {"user": user.to_dict()}


# ---------------------------------------------------------------------------
# Profile Router
# ---------------------------------------------------------------------------
profile_router = APIRouter(prefix="/users", tags=["users"])


@profile_router.get("/me")
async def get_profile(user: CurrentUser = Depends(get_current_user)) -> dict:
    return {"user": UserRepository().get(user.user_id).to_dict()}


@profile_router.patch("/me")
async def update_profile(body: UpdateProfileRequest, user: CurrentUser = Depends(get_current_user)) -> dict:
    updated = UserRegistrationHandler().update_profile(UpdateProfile(user_id=user.user_id, **body.model_dump()))
    return {"user": updated.to_dict()}
