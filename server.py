from os import environ as env
from urllib.parse import quote_plus, urlencode

from authlib.integrations.flask_client import OAuth
from dotenv import find_dotenv, load_dotenv
from flask import Flask, redirect, render_template, request, session, url_for
from werkzeug.middleware.proxy_fix import ProxyFix

from business.entities import Subscriber
from business.newsletter_service import NewsletterService
from config import get_settings
from persistence.subscriber_store import build_subscriber_store

ENV_FILE = find_dotenv()
if ENV_FILE:
    load_dotenv(ENV_FILE)


app = Flask(__name__)
app.secret_key = env.get("APP_SECRET_KEY")

if env.get("BEHIND_PROXY") == "yes":
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_host=1, x_proto=1)

oauth = OAuth(app)

oauth.register(
    "auth0",
    client_id=env.get("AUTH0_CLIENT_ID"),
    client_secret=env.get("AUTH0_CLIENT_SECRET"),
    client_kwargs={
        "scope": "openid profile email",
    },
    server_metadata_url=f'https://{env.get("AUTH0_DOMAIN")}/.well-known/openid-configuration',
)

subscriber_store = build_subscriber_store(get_settings())


class NewsletterConfiguration:
    @property
    def newsletter_service(self) -> NewsletterService:
        return NewsletterService(store=subscriber_store)


@app.route("/")
def home():
    return redirect(url_for("newsletter"))


@app.get("/newsletter")
def newsletter():
    return render_template(template_name_or_list="newsletter.html", errors=[])


@app.post("/newsletter")
def enlist():
    subscriber = Subscriber(
        name=request.form.get("name", ""), email=request.form.get("email", "")
    )
    result = NewsletterConfiguration().newsletter_service.enlist(subscriber)
    if not result.is_success:
        return (
            render_template(
                template_name_or_list="newsletter.html",
                errors=result.errors,
                name=subscriber.name,
                email=subscriber.email,
            ),
            400,
        )
    return render_template(template_name_or_list="welcome.html", subscriber=subscriber)


@app.get("/subscribers")
def subscribers():
    session_user = session.get("user")
    if session_user is None:
        return redirect(url_for("login"))
    newsletter_service = NewsletterConfiguration().newsletter_service
    return render_template(
        template_name_or_list="subscribers.html",
        subscribers=newsletter_service.list_all(),
        errors=[],
    )


@app.post("/subscribers/cancel")
def cancel():
    session_user = session.get("user")
    if session_user is None:
        return redirect(url_for("login"))
    email = request.form.get("email", None)
    if email is None:
        return "No email provided", 400
    newsletter_service = NewsletterConfiguration().newsletter_service
    result = newsletter_service.cancel(email)
    return (
        render_template(
            template_name_or_list="subscribers.html",
            subscribers=newsletter_service.list_all(),
            errors=result.errors,
        ),
        200 if result.is_success else 404,
    )


@app.route("/callback", methods=["GET", "POST"])
def callback():
    token = oauth.auth0.authorize_access_token()
    session["user"] = token
    session.permanent = True
    return redirect("/subscribers")


@app.route("/login")
def login():
    return oauth.auth0.authorize_redirect(
        redirect_uri=url_for("callback", _external=True)
    )


@app.route("/logout")
def logout():
    session.clear()
    return redirect(
        "https://"
        + env.get("AUTH0_DOMAIN")
        + "/v2/logout?"
        + urlencode(
            {
                "returnTo": url_for("home", _external=True),
                "client_id": env.get("AUTH0_CLIENT_ID"),
            },
            quote_via=quote_plus,
        )
    )


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=env.get("PORT", 8700))
