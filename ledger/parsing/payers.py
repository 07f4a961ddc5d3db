import re

from ledger.parsing.text import normalize_text

UNKNOWN_PAYER = "desconhecido"

_SPOUSE_PHRASES = re.compile(r"\bda (?:minha )?esposa\b|\bda mulher\b|\bdela\b")
_OWN_PHRASES = re.compile(r"\bmeus?\b")


def _digits(value: str | None) -> str:
    return re.sub(r"\D", "", value or "")


class PayerDirectory:
    """The closed set of payers, keyed by the sender's transport identity."""

    def __init__(
        self,
        my_sender_id: str,
        spouse_sender_id: str,
        my_name: str = "matheus",
        spouse_name: str = "esposa",
    ):
        self.my_sender_id = _digits(my_sender_id)
        self.spouse_sender_id = _digits(spouse_sender_id)
        self.my_name = my_name
        self.spouse_name = spouse_name

    def payer_for(self, sender_id: str | None) -> str | None:
        # WhatsApp ids look like "5531999999999@c.us"; keep the number part
        if not sender_id:
            return None
        number = _digits(str(sender_id).split("@")[0])
        if number and number == self.my_sender_id:
            return self.my_name
        if number and number == self.spouse_sender_id:
            return self.spouse_name
        return UNKNOWN_PAYER

    def explicit_filter(self, text: str | None, sender_payer: str | None) -> str | None:
        """Payer named in the text, or None to keep both payers."""
        s = normalize_text(text)
        if _SPOUSE_PHRASES.search(s):
            return self.spouse_name
        for name in (self.my_name, self.spouse_name):
            key = re.escape(normalize_text(name))
            if re.search(rf"\b(?:do|da) {key}\b", s):
                return name
        if _OWN_PHRASES.search(s):
            return sender_payer or UNKNOWN_PAYER
        return None
