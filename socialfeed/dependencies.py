from typing import Annotated

from fastapi import Depends, Request

from socialfeed.auth.deps import AuthContext, get_auth_context
from socialfeed.core.tables import Tables


async def get_tables(request: Request) -> Tables:
    """DynamoDB tables built at startup"""
    return request.app.state.tables


CurrentUser = Annotated[AuthContext, Depends(get_auth_context)]
Store = Annotated[Tables, Depends(get_tables)]
