"""
User-facing messages for the booking conversation.

Every message the flow manager or the validators emit comes from this catalog.
English is the default; Slovene carries the wording of the first deployment.
"""

from typing import Dict

PROMPTS: Dict[str, Dict[str, str]] = {
    "en": {
        "greeting": "Hello! What is your name?",
        "name_ack": "Hi {name}, glad to have you with us.",
        "ask_age": "How old are you?",
        "age_ack": "So your name is {name} and you are {age} years old.",
        "ask_date": "Which date would you like to book the appointment for?",
        "booked": "Your appointment is booked for {date}.",
        "thanks": "Thank you for taking part, {name}.",
        "book_again": "If you'd like to book another date, just send me a message :D",
        "fallback": "Sorry, I didn't understand that :|",
        "name_empty": "Please enter a name that has at least one letter :D",
        "age_out_of_range": "Please enter an age between {min_age} and {max_age}.",
        "age_unparseable": (
            "I'm sorry, I didn't understand that as your age. "
            "Please enter just the number of your age, between {min_age} and {max_age}."
        ),
        "date_too_soon": (
            "Sorry, please enter a date in the form DD.MM.YYYY or MM/DD/YYYY "
            "that is at least {lead} from now."
        ),
        "date_unparseable": (
            "Sorry, I didn't understand that as a valid date. "
            "Please enter a date in the form DD.MM.YYYY or MM/DD/YYYY "
            "that is at least {lead} from now."
        ),
    },
    "sl": {
        "greeting": "Pozdravljen! Kako ti je ime?",
        "name_ack": "Živjo {name}, sem vesel da si z nami.",
        "ask_age": "Koliko si pa star?",
        "age_ack": "Torej ime ti je {name} in star si {age}.",
        "ask_date": "Na kateri datum bi rad rezerviral sestanek?",
        "booked": "Sestanek imaš rezerviran za {date}.",
        "thanks": "Hvala za sodelovanje {name}.",
        "book_again": "Če bi rad rezerviral še en datum mi kaj napiši :D",
        "fallback": "Tega na žalost nisem razumel :|",
        "name_empty": "Prosim vnesi ime, ki ima vsaj eno črko :D",
        "age_out_of_range": "Prosim vnesi starost med {min_age} in {max_age}.",
        "age_unparseable": (
            "Se opravičujem, ampak tega nisem zastopil kot tvojo starost. "
            "Prosim vnesi samo številko tvoje starosti, ki je lahko med {min_age} in {max_age}."
        ),
        "date_too_soon": (
            "Oprosti, vnesti moraš datum oblike DD.MM.YYYY ali MM/DD/YYYY, "
            "ki je vsaj {lead} stran od tega trenutka."
        ),
        "date_unparseable": (
            "Oprosti, tega nisem razumel kot pravilni vpis datuma. "
            "Vnesti moraš datum oblike DD.MM.YYYY ali MM/DD/YYYY, "
            "ki je vsaj {lead} stran od tega trenutka."
        ),
    },
}

# Lead time wording, keyed by language then by whole hours
_LEAD_HOURS = {
    "en": ("one hour", "{hours} hours"),
    "sl": ("eno uro", "{hours} ur"),
}
_LEAD_MINUTES = {
    "en": "{minutes} minutes",
    "sl": "{minutes} minut",
}


def get_prompt(language: str, key: str, **kwargs) -> str:
    """
    Look up and format a message.

    Args:
        language: Catalog language ("en" or "sl")
        key: Message key
        **kwargs: Placeholder values

    Returns:
        Formatted message text
    """
    template = PROMPTS[language][key]
    return template.format(**kwargs) if kwargs else template


def describe_lead(language: str, minutes: int) -> str:
    """Render a lead time such as 'one hour' or '90 minutes'."""
    if minutes % 60 == 0 and minutes > 0:
        hours = minutes // 60
        singular, plural = _LEAD_HOURS[language]
        return singular if hours == 1 else plural.format(hours=hours)
    return _LEAD_MINUTES[language].format(minutes=minutes)
