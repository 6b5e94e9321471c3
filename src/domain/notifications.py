"""
Notification dispatch - Best-effort operator alert and applicant confirmation.

Both messages are sent independently. Any failure is logged and swallowed
here, so `dispatch()` never raises and the intake outcome never depends on
the mail transport.
"""

import logging
from dataclasses import dataclass
from html import escape

from .models import ApplicationRecord
from .ports import EmailMessage, EmailSender

logger = logging.getLogger(__name__)

COUNTRY_LABELS = {
    "france": "France",
    "belgique": "Belgique",
    "suisse": "Suisse",
    "indecis": "Indécis",
}

_OPERATOR_TEMPLATE = """<!DOCTYPE html>
<html>
  <head><meta charset="utf-8"></head>
  <body style="font-family: Arial, sans-serif; color: #333;">
    <h1>Nouvelle candidature</h1>
    <p>Une nouvelle demande d'immigration professionnelle</p>
    <table>
      <tr><th align="left">Candidat</th><td>{name}</td></tr>
      <tr><th align="left">Email</th><td><a href="mailto:{email}">{email}</a></td></tr>
      <tr><th align="left">Téléphone</th><td><a href="tel:{phone}">{phone}</a></td></tr>
      <tr><th align="left">Pays de destination</th><td>{country}</td></tr>
      <tr><th align="left">Profession</th><td>{profession}</td></tr>
    </table>
    <h2>Message du candidat</h2>
    <p>{message}</p>
    <p style="color: #999; font-size: 12px;">Candidature {record_id} reçue le {created_at}</p>
  </body>
</html>
"""

_CONFIRMATION_TEMPLATE = """<!DOCTYPE html>
<html>
  <head><meta charset="utf-8"></head>
  <body style="font-family: Arial, sans-serif; color: #333;">
    <h1>Candidature bien reçue</h1>
    <p>Merci {name}</p>
    <p>Nous avons bien reçu votre candidature pour <strong>{country}</strong>
    et nous vous remercions de votre confiance.</p>
    <p>Notre équipe va examiner votre dossier et vous recontactera dans les
    <strong>24 à 48 heures</strong>.</p>
    <h2>Récapitulatif de votre demande</h2>
    <ul>
      <li>Nom : {name}</li>
      <li>Email : {email}</li>
      <li>Téléphone : {phone}</li>
      <li>Destination : {country}</li>
      <li>Profession : {profession}</li>
    </ul>
    <p>L'équipe ProVisa</p>
  </body>
</html>
"""


@dataclass(frozen=True)
class DispatchReport:
    """Which of the two sends went through."""

    operator_notified: bool
    confirmation_sent: bool


def _template_fields(record: ApplicationRecord) -> dict[str, str]:
    country = COUNTRY_LABELS.get(record.destination_country, record.destination_country)
    return {
        "name": escape(record.name),
        "email": escape(record.email),
        "phone": escape(record.phone),
        "country": escape(country),
        "profession": escape(record.profession),
        "message": escape(record.message).replace("\n", "<br>"),
        "record_id": str(record.id),
        "created_at": record.created_at.isoformat(),
    }


@dataclass
class NotificationDispatcher:
    """
    Fire, log, forget.

    No retry, no backoff: a failed send is logged with the record id so an
    operator can follow up from the stored application.
    """

    sender: EmailSender
    from_address: str
    operator_address: str

    def build_operator_notification(self, record: ApplicationRecord) -> EmailMessage:
        return EmailMessage(
            sender=self.from_address,
            to=(self.operator_address,),
            subject=f"Nouvelle candidature - {record.name}",
            html=_OPERATOR_TEMPLATE.format(**_template_fields(record)),
            reply_to=record.email,
        )

    def build_confirmation(self, record: ApplicationRecord) -> EmailMessage:
        return EmailMessage(
            sender=self.from_address,
            to=(record.email,),
            subject="Candidature bien reçue - ProVisa",
            html=_CONFIRMATION_TEMPLATE.format(**_template_fields(record)),
            reply_to=self.operator_address,
        )

    def dispatch(self, record: ApplicationRecord) -> DispatchReport:
        operator_notified = self._send(self.build_operator_notification(record), record, "operator")
        confirmation_sent = self._send(self.build_confirmation(record), record, "confirmation")
        return DispatchReport(
            operator_notified=operator_notified,
            confirmation_sent=confirmation_sent,
        )

    def _send(self, message: EmailMessage, record: ApplicationRecord, kind: str) -> bool:
        try:
            self.sender.send(message)
        except Exception:
            logger.exception("Failed to send %s email for application %s", kind, record.id)
            return False
        logger.info("Sent %s email for application %s", kind, record.id)
        return True
