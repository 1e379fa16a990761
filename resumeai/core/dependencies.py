from fastapi import Header, Request

from resumeai.gateway.gateway import LlmGateway
from resumeai.gateway.errors import ConfigurationError


def get_gateway(request: Request) -> LlmGateway:
    """Gateway built once by the lifespan and stored on app.state."""
    gateway = getattr(request.app.state, "gateway", None)
    if gateway is None:
        raise ConfigurationError("Gateway is not initialized")
    return gateway


async def get_user_id(x_user_id: str = Header("anonymous", description="Caller id used for quotas")) -> str:
    return x_user_id.strip() or "anonymous"
