"""
Booking Bot - Turn-based slot-filling conversation for appointment booking

This service collects three pieces of information from a user (name, age and
desired appointment date) across successive message turns, validating and
normalizing each answer before advancing, and finally echoes the booking back.

Key Features:
- 4-state cyclic flow (none -> name -> age -> date -> none)
- Number recognition for ages ("twenty five", "25")
- Natural language date recognition (tomorrow, Sunday at 5pm, 11/14/2026, ranges)
- Minimum one hour lead time for bookings
- English and Slovene prompts
- Redis-backed hosting service keyed by conversation and user

Architecture:
- FastAPI web framework for REST endpoints
- Redis for flow state and user profile persistence
- Flow manager as a pure function of (flow, profile, input)
- Validation utilities wrapping the recognizers
- Pydantic models for API contracts
"""

__version__ = "1.0.0"
