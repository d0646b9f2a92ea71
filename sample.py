"""
waypoint - sample application

Demonstrates prefixes, groups, parameter conditions, middleware and URL
generation.
Run with: uv run uvicorn sample:router --reload
"""


import logging

from waypoint import JSONResponse, RequestLoggingMiddleware, Router, TextResponse, params_from_scope
from waypoint.types import ASGIApp, Receive, Scope, Send

# =============================================================================
# Application Setup
# =============================================================================

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-8s %(name)s  %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%S%z",
)
logger = logging.getLogger("waypoint.sample")

router = Router()

# Outermost layer for every route registered below
router.use(RequestLoggingMiddleware)


def powered_by(app: ASGIApp) -> ASGIApp:
    """Add an X-Powered-By header to every response."""
    async def wrapped(scope: Scope, receive: Receive, send: Send) -> None:
        async def send_with_header(message):
            if message["type"] == "http.response.start":
                message["headers"] = [*message.get("headers", []), (b"x-powered-by", b"waypoint")]
            await send(message)

        await app(scope, receive, send_with_header)

    return wrapped


# =============================================================================
# Routes - Hello World
# =============================================================================


@router.get("/")
async def index(scope: Scope, receive: Receive, send: Send) -> None:
    await TextResponse("Hello, World!")(send)


@router.get("/hello/{name}")
async def hello(scope: Scope, receive: Receive, send: Send) -> None:
    name = params_from_scope(scope).by_name("name")
    await TextResponse(f"Hello, {name}!")(send)


# =============================================================================
# Routes - Articles (same pattern, picked by condition)
# =============================================================================


async def article_by_id(scope: Scope, receive: Receive, send: Send) -> None:
    article_id = params_from_scope(scope).by_name("id")
    await JSONResponse({
        "id": int(article_id),
        "url": router.url("articles.get", article_id),
    })(send)


async def article_by_slug(scope: Scope, receive: Receive, send: Send) -> None:
    slug = params_from_scope(scope).by_name("slug")
    await JSONResponse({"slug": slug})(send)


def articles(r: Router) -> None:
    r.use(powered_by)

    r.get("/{id}").where("id", r"^\d+$").name("articles.get").handle(article_by_id)
    r.get("/{slug}").where("slug", r"^[a-z0-9-]+$").name("articles.by_slug").handle(article_by_slug)


router.prefix("/articles", articles)


# =============================================================================
# Routes - Users (parameter in the prefix)
# =============================================================================


async def user_articles(scope: Scope, receive: Receive, send: Send) -> None:
    await JSONResponse(params_from_scope(scope).as_dict())(send)


def users(r: Router) -> None:
    r.where("userId", r"^\d+$")
    r.get("/articles/{articleId}").where("articleId", r"^\d+$") \
        .name("users.articles.get").handle(user_articles)


router.prefix("/users/{userId}", users)


# =============================================================================
# Fallbacks
# =============================================================================


async def not_found(scope: Scope, receive: Receive, send: Send) -> None:
    await JSONResponse({"error": "Not Found", "path": scope.get("path")}, status_code=404)(send)


async def internal_error(scope: Scope, receive: Receive, send: Send, exc: BaseException) -> None:
    await JSONResponse({"error": "Internal Server Error"}, status_code=500)(send)


router.handle_not_found(not_found)
router.handle_panic(internal_error)

logger.info("Article URL: %s", router.url("users.articles.get", 1, 2))


if __name__ == "__main__":
    router.run()
