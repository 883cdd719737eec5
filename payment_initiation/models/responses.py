"""Response schemas for the auth server and the payment initiation API."""

from typing import Optional

from pydantic import BaseModel, Field


class TokenResponse(BaseModel):
    access_token: Optional[str] = None
    token_type: Optional[str] = None
    expires_in: Optional[int] = None
    scope: Optional[str] = None


class PaymentInitiationResponse(BaseModel):
    payment_id: str = Field(alias="paymentId")
    transaction_status: Optional[str] = Field(None, alias="transactionStatus")


class AuthorisationResponse(BaseModel):
    authorisation_id: str = Field(alias="authorisationId")
    sca_status: Optional[str] = Field(None, alias="scaStatus")


class Href(BaseModel):
    href: str


class ScaLinks(BaseModel):
    sca_oauth: Optional[Href] = Field(None, alias="scaOAuth")
    sca_redirect: Optional[Href] = Field(None, alias="scaRedirect")


class ChallengeData(BaseModel):
    data: list[str] = Field(default_factory=list)


class UpdatePsuDataResponse(BaseModel):
    """Body of the update PSU data call. Which parts are present depends on the SCA approach."""

    sca_status: Optional[str] = Field(None, alias="scaStatus")
    links: Optional[ScaLinks] = Field(None, alias="_links")
    challenge_data: Optional[ChallengeData] = Field(None, alias="challengeData")


class ScaStatusResponse(BaseModel):
    sca_status: str = Field(alias="scaStatus")


class PaymentStatusResponse(BaseModel):
    transaction_status: str = Field(alias="transactionStatus")
