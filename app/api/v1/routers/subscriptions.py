from fastapi import APIRouter, Depends

from app.api.v1.dependencies import get_active_user, get_user_service
from app.core.responses import ApiResponse, ok
from app.db.models.users import User
from app.features.users.schemas import SubscriptionToggleOut
from app.features.users.services import UserService

router = APIRouter(
    prefix="/subscriptions",
    tags=["subscriptions"],
    responses={404: {"description": "Not Found"}},
)


@router.post(
    "/c/{channel_id}",
    summary="S'abonner / se désabonner d'une chaîne",
    response_model=ApiResponse[SubscriptionToggleOut],
)
def toggle_subscription(
    channel_id: str,
    user: User = Depends(get_active_user),
    svc: UserService = Depends(get_user_service),
):
    result = svc.toggle_subscription(channel_id, subscriber_id=user.id)
    message = "Subscribed successfully" if result.subscribed else "Unsubscribed successfully"
    return ok(result, message)
