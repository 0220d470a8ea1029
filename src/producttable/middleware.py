# producttable/middleware.py

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# 认证策略只从 request 中提取凭证, 校验交给依赖项 (api/dependencies/authentication.py)
def _extract_bearer_token(request: Request) -> None:
    """Strategy for extracting a JWT Bearer token and placing it in state."""
    header = request.headers.get('Authorization')
    if header and header.startswith("Bearer "):
        setattr(request.state, "token", header.split(" ", 1)[1].strip())

def _extract_api_key(request: Request) -> None:
    """Strategy for extracting an Api-Key and placing it in state."""
    api_key_value = request.headers.get('Api-Key')
    if api_key_value:
        setattr(request.state, "api_key", api_key_value)

class AuthenticationMiddleware(BaseHTTPMiddleware):
    AUTH_EXTRACTORS = [
        _extract_bearer_token,
        _extract_api_key,
    ]

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        # 为每个请求重置状态
        request.state.token = None
        request.state.api_key = None
        request.state.operator = None

        for extractor in self.AUTH_EXTRACTORS:
            extractor(request)

        return await call_next(request)
