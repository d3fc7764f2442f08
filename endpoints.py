from functools import lru_cache

import jwt
from fastapi import Depends, FastAPI, HTTPException, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jwt.jwks_client import PyJWKClient
from pydantic import BaseModel

from business.entities import Subscriber, ValidationResult
from business.newsletter_service import NewsletterService
from config import Settings, get_settings
from persistence.subscriber_store import build_subscriber_store

subscriber_store = build_subscriber_store(get_settings())


def newsletter_service() -> NewsletterService:
    return NewsletterService(store=subscriber_store)


@lru_cache
def get_jwks_client(settings=Depends(get_settings)) -> PyJWKClient:
    jwks_url = f"https://{settings.auth0_domain}/.well-known/jwks.json"
    return jwt.PyJWKClient(jwks_url)


class UnauthorizedException(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status.HTTP_403_FORBIDDEN, detail=detail)


app = FastAPI()
origins = ["http://localhost:5173"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

token_auth = HTTPBearer(auto_error=True)


def authenticated_user(
    creds: HTTPAuthorizationCredentials | None = Depends(token_auth),
    jwks_client: PyJWKClient = Depends(get_jwks_client),
    settings: Settings = Depends(get_settings),
) -> dict:
    assert creds is not None
    assert isinstance(creds.credentials, str)
    try:
        signing_key = jwks_client.get_signing_key_from_jwt(creds.credentials).key
        payload = jwt.decode(
            creds.credentials,
            signing_key,
            algorithms=[settings.auth0_algorithms],
            audience=settings.auth0_audience,
            issuer=settings.auth0_issuer,
        )
    except jwt.PyJWTError as error:
        raise UnauthorizedException(detail=str(error))

    return payload


class SubscriberForm(BaseModel):
    name: str
    email: str


class SubscriberView(BaseModel):
    id: str
    name: str
    email: str


@app.post("/subscribers")
def enlist(
    form: SubscriberForm,
    response: Response,
    service: NewsletterService = Depends(newsletter_service),
) -> ValidationResult:
    result = service.enlist(Subscriber(name=form.name, email=form.email))
    if not result.is_success:
        response.status_code = status.HTTP_400_BAD_REQUEST
    return result


@app.get("/subscribers")
def list_subscribers(
    user: dict = Depends(authenticated_user),
    service: NewsletterService = Depends(newsletter_service),
) -> list[SubscriberView]:
    return [
        SubscriberView(id=subscriber.id, name=subscriber.name, email=subscriber.email)
        for subscriber in service.list_all()
    ]


@app.delete("/subscribers/{email:path}")
def cancel(
    email: str,
    response: Response,
    user: dict = Depends(authenticated_user),
    service: NewsletterService = Depends(newsletter_service),
) -> ValidationResult:
    result = service.cancel(email)
    if not result.is_success:
        response.status_code = status.HTTP_404_NOT_FOUND
    return result
