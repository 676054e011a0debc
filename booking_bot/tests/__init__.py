"""
Tests for the Booking Bot service

Test suite covering:
- Flow state transitions and the full booking cycle
- Slot validators (name, age, date)
- Number and date-time recognizers
- Configuration loading
- API endpoints with mocked Redis persistence

Run tests with:
    python -m pytest booking_bot/tests/ -v
    python -m pytest booking_bot/tests/test_fsm_flow.py -v
    python -m pytest booking_bot/tests/test_api_integration.py -v
"""
