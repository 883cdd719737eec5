"""
Redirect callback endpoint.

GET /callback: the bank redirects the PSU here after an OAuth SCA, with
the authorisation code and the state that was put in the SCA URL. The code
is handed to the run waiting on that state.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel

from payment_initiation.interaction.callback import CallbackCodeSource

router = APIRouter(tags=["callback"])


class CallbackResponse(BaseModel):
    state: str
    code_received: bool
    message: str


def get_code_source(request: Request) -> CallbackCodeSource:
    return request.app.state.code_source


@router.get("/callback", response_model=CallbackResponse)
async def receive_callback(
    state: str,
    code: Optional[str] = None,
    error: Optional[str] = None,
    error_description: Optional[str] = None,
    code_source: CallbackCodeSource = Depends(get_code_source),
):
    """Deliver the authorisation code for a pending SCA."""
    if not code_source.deliver(state, code, error):
        raise HTTPException(status_code=404, detail=f"No authorisation pending for state: {state}")

    if error or not code:
        return CallbackResponse(
            state=state,
            code_received=False,
            message=f"Authorisation failed: {error_description or error or 'no code returned'}",
        )
    return CallbackResponse(
        state=state,
        code_received=True,
        message="Authorisation received, you can close this window",
    )
