# app/orchestrator/temporal/common/fallback.py
FALLBACK_TEMPLATE = (
    "Dear {customer_name}, your delivery is delayed by {delay_minutes} minutes due to traffic. "
    "We are working to deliver it as soon as possible. Thank you for your patience."
)


def fallback_message(delay_minutes: int, customer_name: str) -> str:
    """The fixed delay notice used whenever no generated text is available."""
    return FALLBACK_TEMPLATE.format(customer_name=customer_name, delay_minutes=delay_minutes)
