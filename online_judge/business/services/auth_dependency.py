from fastapi import Depends, HTTPException, Request, status


class BearerToken:
    def __init__(self, scheme: str = "Bearer"):
        self.scheme = scheme

    async def __call__(self, request: Request) -> dict:
        authorization = request.headers.get("Authorization", "")
        scheme, _, token = authorization.partition(" ")
        if scheme.lower() != self.scheme.lower() or not token:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Bearer token not found in Authorization header",
                headers={"WWW-Authenticate": self.scheme},
            )

        from online_judge.business.services.auth_util import decode_token
        token_data = decode_token(token.strip())
        if not token_data or not token_data.get("sub"):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Invalid or expired token"
            )

        return token_data


def get_current_username(token_data: dict = Depends(BearerToken())) -> str:
    return token_data["sub"]
