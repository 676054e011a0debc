"""
Booking Bot Service - FastAPI Application

Provides HTTP REST API for the booking conversation. Flow state is persisted
in Redis per conversation, the collected profile per user; each inbound
message loads both, runs one turn through the flow manager and saves them back.
"""

import os
import asyncio
import logging
import time
import json
from contextlib import asynccontextmanager
from typing import Optional, Tuple

from fastapi import FastAPI, HTTPException
import redis.asyncio as redis

from booking_bot import __version__
from booking_bot.config import BookingConfig
from booking_bot.models import (
    ConversationFlow, Question, UserProfile,
    TurnRequest, TurnResponse, ProfileModel,
    ConversationStatusResponse, HealthResponse, MetricsResponse,
    AdminClearSessionsResponse
)
from booking_bot.fsm_manager import BookingFlowManager

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# Global state
redis_client: Optional[redis.Redis] = None
config: Optional[BookingConfig] = None
app_start_time: float = 0.0

# Key layout
FLOW_PREFIX = "booking:flow:"
PROFILE_PREFIX = "booking:profile:"
METRICS_PREFIX = "booking:metrics:"


# ============================================================================
# Lifespan Management
# ============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage service lifecycle (startup/shutdown)
    """
    global redis_client, config, app_start_time

    logger.info(" Starting Booking Bot service...")
    app_start_time = time.time()

    # Load configuration
    try:
        config = BookingConfig.from_env()
        logger.info(" Configuration loaded")
    except Exception as e:
        logger.error(f" Failed to load configuration: {e}")
        raise

    # Initialize Redis client
    try:
        redis_client = redis.Redis.from_url(
            config.redis_url,
            decode_responses=True
        )
        await redis_client.ping()
        logger.info(" Redis connected")
    except Exception as e:
        logger.warning(f"️ Redis connection failed: {e} - service will start but conversations won't persist")
        redis_client = None

    logger.info(" Booking Bot service ready")

    yield

    # Shutdown
    logger.info(" Shutting down Booking Bot service...")

    if redis_client:
        await redis_client.close()
        logger.info(" Redis connection closed")

    logger.info(" Service stopped")


# ============================================================================
# FastAPI Application
# ============================================================================

app = FastAPI(
    title="Booking Bot Service",
    description="Turn-based name / age / date booking conversation with Redis persistence",
    version=__version__,
    lifespan=lifespan
)


# ============================================================================
# API Endpoints
# ============================================================================

@app.post("/api/v1/conversations/{conversation_id}/messages", response_model=TurnResponse)
async def post_message(conversation_id: str, request: TurnRequest):
    """
    Process one inbound message for a conversation.

    Loads flow state and profile, runs one turn, stores the results.

    Returns:
        Outgoing messages with the updated state and profile
    """
    if not config:
        raise HTTPException(status_code=503, detail="Service not configured")

    flow, profile = await _load_conversation(conversation_id, request.user_id)

    manager = BookingFlowManager(config)
    result = manager.advance(flow, profile, request.text)

    await _save_conversation(conversation_id, request.user_id, result.flow, result.profile)

    # Update metrics
    await _increment_metric("total_turns")
    if result.previous_question == Question.NONE:
        await _increment_metric("conversations_started")
    if result.completed:
        await _increment_metric("completed_bookings")
        logger.info(f" Booking completed for conversation {conversation_id}: {result.booking.date}")
    if result.error:
        await _increment_metric("rejected_inputs")

    return TurnResponse(
        messages=result.messages,
        state=result.flow.last_question_asked.value,
        previous_state=result.previous_question.value,
        profile=ProfileModel(**result.profile.to_dict()),
        completed=result.completed,
        booking=ProfileModel(**result.booking.to_dict()) if result.booking else None,
        error=result.error.reason.value if result.error else None,
        success=result.error is None
    )


@app.get("/api/v1/conversations/{conversation_id}", response_model=ConversationStatusResponse)
async def get_conversation_status(conversation_id: str, user_id: str):
    """
    Get status of an existing conversation.

    Returns the pending question, collected profile and flow expiry.
    """
    if not config:
        raise HTTPException(status_code=503, detail="Service not configured")

    if not redis_client:
        raise HTTPException(status_code=404, detail="Conversation not found (Redis unavailable)")

    flow_key = f"{FLOW_PREFIX}{conversation_id}"
    try:
        flow_data = await redis_client.get(flow_key)
    except Exception as e:
        logger.error(f" Failed to retrieve conversation {conversation_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to retrieve conversation")

    if not flow_data:
        raise HTTPException(status_code=404, detail="Conversation not found or expired")

    flow, profile = await _load_conversation(conversation_id, user_id)

    expires_in = None
    try:
        ttl = await redis_client.ttl(flow_key)
        if ttl > 0:
            expires_in = ttl
    except Exception as e:
        logger.warning(f"️ Failed to get TTL for conversation {conversation_id}: {e}")

    return ConversationStatusResponse(
        conversation_id=conversation_id,
        user_id=user_id,
        state=flow.last_question_asked.value,
        profile=ProfileModel(**profile.to_dict()),
        expires_in_seconds=expires_in
    )


@app.delete("/api/v1/conversations/{conversation_id}")
async def delete_conversation(conversation_id: str, user_id: str):
    """
    Delete a conversation's flow state and the user's profile.
    """
    if not config:
        raise HTTPException(status_code=503, detail="Service not configured")

    if not redis_client:
        return {"message": "Conversation deletion not supported (Redis unavailable)"}

    try:
        deleted = await redis_client.delete(
            f"{FLOW_PREFIX}{conversation_id}",
            f"{PROFILE_PREFIX}{user_id}"
        )
    except Exception as e:
        logger.error(f" Failed to delete conversation {conversation_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to delete conversation")

    if not deleted:
        raise HTTPException(status_code=404, detail="Conversation not found")

    logger.info(f" Conversation deleted: {conversation_id}")
    return {"message": "Conversation deleted successfully"}


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Health check endpoint.

    Checks service status, Redis connectivity, and configuration.
    """
    redis_connected = False
    if redis_client:
        try:
            await asyncio.wait_for(redis_client.ping(), timeout=1.0)
            redis_connected = True
        except Exception:
            redis_connected = False

    config_valid = config is not None

    if not config_valid:
        status = "unhealthy"
    elif not redis_connected:
        status = "degraded"  # Turns still work, nothing persists
    else:
        status = "healthy"

    return HealthResponse(
        status=status,
        redis_connected=redis_connected,
        config_valid=config_valid,
        uptime_seconds=time.time() - app_start_time
    )


@app.get("/metrics", response_model=MetricsResponse)
async def get_metrics():
    """
    Get conversation counters.
    """
    if not redis_client:
        return MetricsResponse(
            total_turns=0,
            conversations_started=0,
            completed_bookings=0,
            rejected_inputs=0,
            active_conversations_count=0
        )

    try:
        counters = {}
        for name in ("total_turns", "conversations_started", "completed_bookings", "rejected_inputs"):
            counters[name] = int(await redis_client.get(f"{METRICS_PREFIX}{name}") or 0)

        active = 0
        cursor = 0
        while True:
            cursor, keys = await redis_client.scan(cursor, match=f"{FLOW_PREFIX}*", count=100)
            active += len(keys)
            if cursor == 0:
                break

        return MetricsResponse(active_conversations_count=active, **counters)

    except Exception as e:
        logger.error(f" Failed to retrieve metrics: {e}")
        raise HTTPException(status_code=500, detail="Failed to retrieve metrics")


@app.post("/admin/clear_sessions", response_model=AdminClearSessionsResponse)
async def clear_sessions():
    """
    Clear all stored flow states and profiles (admin endpoint).
    """
    if not redis_client:
        return AdminClearSessionsResponse(sessions_deleted=0, message="Redis not connected")

    try:
        keys_deleted = 0
        for prefix in (FLOW_PREFIX, PROFILE_PREFIX):
            cursor = 0
            while True:
                cursor, keys = await redis_client.scan(cursor, match=f"{prefix}*", count=100)
                if keys:
                    keys_deleted += await redis_client.delete(*keys)
                if cursor == 0:
                    break

        logger.info(f" Sessions cleared: {keys_deleted} keys deleted")
        return AdminClearSessionsResponse(
            sessions_deleted=keys_deleted,
            message=f"Successfully deleted {keys_deleted} keys"
        )

    except Exception as e:
        logger.error(f" Failed to clear sessions: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to clear sessions: {str(e)}")


# ============================================================================
# Helper Functions
# ============================================================================

async def _load_conversation(conversation_id: str, user_id: str) -> Tuple[ConversationFlow, UserProfile]:
    """Load flow state and profile, starting fresh when nothing is stored"""
    if not redis_client:
        return ConversationFlow(), UserProfile()

    try:
        flow_data = await redis_client.get(f"{FLOW_PREFIX}{conversation_id}")
        profile_data = await redis_client.get(f"{PROFILE_PREFIX}{user_id}")
    except Exception as e:
        logger.warning(f"️ Failed to load conversation {conversation_id}: {e} - starting fresh")
        return ConversationFlow(), UserProfile()

    try:
        flow = ConversationFlow.from_dict(json.loads(flow_data)) if flow_data else ConversationFlow()
        profile = UserProfile.from_dict(json.loads(profile_data)) if profile_data else UserProfile()
    except (ValueError, TypeError, AttributeError) as e:
        logger.error(f" Failed to deserialize conversation {conversation_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to load conversation")

    return flow, profile


async def _save_conversation(conversation_id: str, user_id: str, flow: ConversationFlow, profile: UserProfile):
    """Store flow state and profile with a refreshed TTL"""
    if not redis_client:
        return

    try:
        await redis_client.setex(
            f"{FLOW_PREFIX}{conversation_id}",
            config.session_ttl,
            json.dumps(flow.to_dict())
        )
        await redis_client.setex(
            f"{PROFILE_PREFIX}{user_id}",
            config.session_ttl,
            json.dumps(profile.to_dict())
        )
    except Exception as e:
        logger.warning(f"️ Failed to save conversation {conversation_id}: {e}")


async def _increment_metric(metric_name: str):
    """Increment a metric counter in Redis"""
    if redis_client:
        try:
            await redis_client.incr(f"{METRICS_PREFIX}{metric_name}")
        except Exception as e:
            logger.warning(f"️ Failed to increment metric {metric_name}: {e}")


# ============================================================================
# Root Endpoint
# ============================================================================

@app.get("/")
async def root():
    """
    Service information endpoint
    """
    return {
        "service": "Booking Bot Service",
        "version": __version__,
        "status": "operational",
        "endpoints": {
            "post_message": "POST /api/v1/conversations/{conversation_id}/messages",
            "get_status": "GET /api/v1/conversations/{conversation_id}?user_id=",
            "delete_conversation": "DELETE /api/v1/conversations/{conversation_id}?user_id=",
            "health": "GET /health",
            "metrics": "GET /metrics",
            "clear_sessions": "POST /admin/clear_sessions"
        }
    }


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", "8006"))

    uvicorn.run(
        "booking_bot.app:app",
        host="0.0.0.0",
        port=port,
        log_level="info"
    )
