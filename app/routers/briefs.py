"""Travel brief API: rate-limited proxy to the LLM provider."""
import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from app import llm_client
from app.briefs import build_prompt, parse_brief_text, time_context
from app.client_identity import resolve_client_identifier
from app.exceptions import BriefGenerationError, BriefParseError
from app.models import BriefRequest, BriefResponse
from app.rate_limiter import RateLimitDecision, RateLimiter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


def get_rate_limiter(request: Request) -> RateLimiter:
    """The limiter is built in the app lifespan and lives on app.state."""
    limiter = getattr(request.app.state, "rate_limiter", None)
    if limiter is None:
        raise RuntimeError("Rate limiter not initialized")
    return limiter


async def enforce_rate_limit(
    request: Request,
    response: Response,
    limiter: RateLimiter = Depends(get_rate_limiter),
) -> RateLimitDecision:
    """Count this request against every policy; raise LimitExceeded when any is over."""
    identifier = resolve_client_identifier(request.headers)
    decision = await limiter.check_all(identifier)
    if not decision.allowed:
        raise decision.failure_reason
    response.headers["X-RateLimit-Remaining"] = str(decision.remaining)
    return decision


async def _generate(body: BriefRequest, request: Request, extended: bool) -> BriefResponse:
    logger.info(
        "%s request: %s (%s) from %s",
        "Extended brief" if extended else "Travel brief",
        body.destination,
        time_context(body, prefer_month=extended) or "general",
        resolve_client_identifier(request.headers),
    )
    try:
        text = await llm_client.create_message(build_prompt(body, extended=extended))
        data = parse_brief_text(text)
    except BriefParseError:
        logger.exception("Model returned unparseable brief for %s", body.destination)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Invalid response from LLM provider")
    except BriefGenerationError:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Failed to generate travel brief")

    return BriefResponse(
        structured_data=data,
        destination=body.destination,
        start_date=body.start_date,
        end_date=body.end_date,
        travel_month=body.travel_month,
    )


@router.post("/generate-brief", response_model=BriefResponse, dependencies=[Depends(enforce_rate_limit)])
async def generate_brief(body: BriefRequest, request: Request):
    return await _generate(body, request, extended=False)


@router.post("/generate-brief-extended", response_model=BriefResponse, dependencies=[Depends(enforce_rate_limit)])
async def generate_brief_extended(body: BriefRequest, request: Request):
    """Neighborhoods, attractions, culture, day trips and activities, keyed on a travel month."""
    return await _generate(body, request, extended=True)
