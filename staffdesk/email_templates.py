"""
MJML Email Templates
Candidate-facing e-mails for the interview booking and onboarding flow (German)
"""

from datetime import date
from typing import Optional

from .utils.sanitization import escape_html

# Expandere brand colors - orange on light gray
THEME = {
    "primary": "#ff6b35",
    "primary_dark": "#e85a25",
    "primary_light": "#fff7ed",
    "background": "#f8f9fa",
    "card_bg": "#ffffff",
    "text_primary": "#333333",
    "text_secondary": "#555555",
    "text_muted": "#666666",
    "border": "#e5e7eb",
    "warning_bg": "#fff3cd",
    "warning_text": "#856404",
}

COMPANY_NAME = "Expandere"
COMPANY_URL = "https://expandere-agentur.com"
COMPANY_PHONE_DISPLAY = "+49 0711 25299903"
COMPANY_PHONE_LINK = "tel:+4971125299903"

GERMAN_WEEKDAYS = ["Montag", "Dienstag", "Mittwoch", "Donnerstag", "Freitag", "Samstag", "Sonntag"]
GERMAN_MONTHS = [
    "Januar",
    "Februar",
    "März",
    "April",
    "Mai",
    "Juni",
    "Juli",
    "August",
    "September",
    "Oktober",
    "November",
    "Dezember",
]


def format_german_date(value: date, with_weekday: bool = True) -> str:
    """'Donnerstag, 12. Juni 2025' (or '12. Juni 2025')"""
    text = f"{value.day:02d}. {GERMAN_MONTHS[value.month - 1]} {value.year}"
    if with_weekday:
        return f"{GERMAN_WEEKDAYS[value.weekday()]}, {text}"
    return text


def get_base_template(
    title: str,
    preview_text: str,
    content_sections: str,
    cta_url: Optional[str] = None,
    cta_label: Optional[str] = None,
    subtitle: Optional[str] = None,
) -> str:
    """Base MJML template wrapper for all emails"""

    cta_section = ""
    if cta_url and cta_label:
        cta_section = f"""
        <mj-section background-color="#ffffff" padding="0 30px 30px 30px">
          <mj-column>
            <mj-button
              href="{cta_url}"
              background-color="{THEME['primary']}"
              color="#ffffff"
              font-weight="bold"
              border-radius="8px"
              padding="10px 0"
              inner-padding="18px 40px"
              font-size="16px">
              {cta_label}
            </mj-button>
            <mj-text font-size="12px" color="{THEME['text_muted']}" align="center">
              Falls der Button nicht funktioniert, kopieren Sie diesen Link in Ihren Browser:<br/>
              {cta_url}
            </mj-text>
          </mj-column>
        </mj-section>
        """

    subtitle_text = ""
    if subtitle:
        subtitle_text = f"""
            <mj-text align="center" color="#ffffff" font-size="16px" padding="10px 0 0 0">
              {subtitle}
            </mj-text>
        """

    return f"""
    <mjml>
      <mj-head>
        <mj-title>{title}</mj-title>
        <mj-preview>{preview_text}</mj-preview>
        <mj-attributes>
          <mj-all font-family="Arial, sans-serif" />
          <mj-text font-size="16px" line-height="1.6" color="{THEME['text_secondary']}" />
        </mj-attributes>
      </mj-head>
      <mj-body background-color="{THEME['background']}" width="600px">
        <!-- Header -->
        <mj-section background-color="{THEME['primary']}" padding="30px 20px" border-radius="8px 8px 0 0">
          <mj-column>
            <mj-text align="center" color="#ffffff" font-size="28px" font-weight="bold" padding="0">
              {title}
            </mj-text>
            {subtitle_text}
          </mj-column>
        </mj-section>

        <!-- Main Content -->
        <mj-section background-color="#ffffff" padding="40px 30px 20px 30px">
          <mj-column>
            {content_sections}
          </mj-column>
        </mj-section>

        {cta_section}

        <!-- Footer -->
        <mj-section background-color="{THEME['primary']}" padding="30px 20px" border-radius="0 0 8px 8px">
          <mj-column>
            <mj-text align="center" color="#ffffff" font-size="20px" font-weight="bold" padding="0">
              {COMPANY_NAME}
            </mj-text>
            <mj-text align="center" color="#ffffff" font-size="14px">
              <a href="{COMPANY_URL}" style="color: #ffffff; text-decoration: none;">expandere-agentur.com</a>
              <span style="margin: 0 8px;">•</span>
              <a href="{COMPANY_URL}/impressum" style="color: #ffffff; text-decoration: none;">Impressum</a>
            </mj-text>
            <mj-text align="center" color="#ffffff" font-size="12px">
              © {date.today().year} {COMPANY_NAME}. Alle Rechte vorbehalten.
            </mj-text>
          </mj-column>
        </mj-section>
      </mj-body>
    </mjml>
    """


def _greeting(first_name: str, last_name: str) -> str:
    return f"""
    <mj-text font-size="24px" font-weight="bold" color="{THEME['text_primary']}" padding="0 0 20px 0">
      Hallo {escape_html(first_name)} {escape_html(last_name)}!
    </mj-text>
    """


def _signature(team: str = "Ihr Recruiting-Team") -> str:
    return f"""
    <mj-text>
      Mit freundlichen Grüßen<br/>
      <strong>{team}</strong>
    </mj-text>
    """


def appointment_invitation_template(first_name: str, last_name: str, booking_url: str) -> str:
    """Invitation to book an interview slot"""
    content = f"""
    {_greeting(first_name, last_name)}
    <mj-text>
      Herzlichen Glückwunsch! Ihre Bewerbung hat uns überzeugt und wir möchten Sie gerne
      zu einem telefonischen Bewerbungsgespräch einladen.
    </mj-text>
    <mj-text>
      Bitte wählen Sie über den folgenden Link einen passenden Termin aus. Termine sind
      montags bis freitags zwischen 08:00 und 17:30 Uhr verfügbar.
    </mj-text>
    <mj-text>
      Wir freuen uns darauf, Sie kennenzulernen!
    </mj-text>
    {_signature()}
    """

    return get_base_template(
        title="Herzlichen Glückwunsch!",
        preview_text="Buchen Sie jetzt Ihren Termin für das Bewerbungsgespräch",
        content_sections=content,
        cta_url=booking_url,
        cta_label="Jetzt Termin buchen",
        subtitle="Buchen Sie Ihren Termin für das Bewerbungsgespräch",
    )


def appointment_confirmation_template(
    first_name: str, last_name: str, appointment_date: date, appointment_time: str
) -> str:
    """Confirmation after the candidate booked a slot"""
    content = f"""
    {_greeting(first_name, last_name)}
    <mj-text>
      Vielen Dank für Ihre Terminbuchung! Wir freuen uns, Ihnen mitteilen zu können,
      dass Ihr Bewerbungsgespräch erfolgreich gebucht wurde.
    </mj-text>
    <mj-table padding="20px 25px" container-background-color="{THEME['background']}" border-left="4px solid {THEME['primary']}">
      <tr>
        <td style="padding: 8px 0; font-weight: bold; color: {THEME['text_primary']}; width: 30%;">Datum:</td>
        <td style="padding: 8px 0;">{format_german_date(appointment_date)}</td>
      </tr>
      <tr>
        <td style="padding: 8px 0; font-weight: bold; color: {THEME['text_primary']};">Uhrzeit:</td>
        <td style="padding: 8px 0;">{appointment_time[:5]} Uhr</td>
      </tr>
    </mj-table>
    <mj-text>
      Wir werden Sie kurz vor dem Termin telefonisch kontaktieren, um das Gespräch zu führen.
      Bitte stellen Sie sicher, dass Sie zu der vereinbarten Zeit telefonisch erreichbar sind.
    </mj-text>
    <mj-text container-background-color="{THEME['primary_light']}" padding="20px 25px">
      <strong>Was Sie erwartet:</strong><br/>
      • Persönliches Kennenlernen (ca. 30 Minuten)<br/>
      • Vorstellung der Position und des Teams<br/>
      • Ihre Fragen zur Stelle und zum Unternehmen<br/>
      • Anruf kurz vor dem vereinbarten Termin
    </mj-text>
    <mj-text>
      Sollten Sie Fragen haben oder den Termin verschieben müssen, können Sie uns gerne kontaktieren.
    </mj-text>
    {_signature()}
    """

    return get_base_template(
        title="Terminbestätigung",
        preview_text=f"Ihr Termin am {format_german_date(appointment_date, False)} ist bestätigt",
        content_sections=content,
        subtitle="Ihr Termin wurde erfolgreich gebucht",
    )


def missed_appointment_template(
    first_name: str,
    last_name: str,
    appointment_date: date,
    appointment_time: str,
    booking_url: str,
) -> str:
    """Sent by an admin after a candidate did not pick up"""
    content = f"""
    {_greeting(first_name, last_name)}
    <mj-text>
      Wir haben bemerkt, dass Sie Ihren Termin am
      <strong>{appointment_date.strftime('%d.%m.%Y')}</strong> um
      <strong>{appointment_time[:5]} Uhr</strong> verpasst haben.
    </mj-text>
    <mj-text>
      Kein Problem! Wir verstehen, dass unvorhergesehene Dinge passieren können.
      Gerne können Sie uns direkt anrufen oder einen neuen Termin buchen.
    </mj-text>
    <mj-text align="center" font-weight="bold" color="{THEME['text_primary']}">
      Rufen Sie uns direkt an:<br/>
      <a href="{COMPANY_PHONE_LINK}" style="color: {THEME['primary']}; font-size: 24px; text-decoration: none;">{COMPANY_PHONE_DISPLAY}</a>
    </mj-text>
    <mj-text align="center" color="{THEME['text_muted']}" font-size="14px">oder</mj-text>
    """

    return get_base_template(
        title="Verpasster Termin",
        preview_text="Buchen Sie einen neuen Termin für Ihr Bewerbungsgespräch",
        content_sections=content,
        cta_url=booking_url,
        cta_label="Neuen Termin buchen",
        subtitle="Wir möchten Ihnen helfen, einen neuen Termin zu finden",
    )


def contract_request_template(
    first_name: str, last_name: str, contract_url: str, valid_days: int
) -> str:
    """Link to the employment contract intake form"""
    content = f"""
    {_greeting(first_name, last_name)}
    <mj-text>
      vielen Dank für Ihr Interesse an der Stelle. Um den Arbeitsvertrag vorzubereiten,
      benötigen wir noch einige weitere Informationen von Ihnen.
    </mj-text>
    <mj-text>
      Bitte klicken Sie auf den folgenden Link, um das Formular auszufüllen.
      Dieser Link ist {valid_days} Tage gültig.
    </mj-text>
    {_signature("Ihr Personalteam")}
    """

    return get_base_template(
        title="Arbeitsvertrag",
        preview_text="Weitere Informationen für Ihren Arbeitsvertrag erforderlich",
        content_sections=content,
        cta_url=contract_url,
        cta_label="Arbeitsvertrag-Formular ausfüllen",
    )


def employment_welcome_template(
    first_name: str,
    last_name: str,
    email: str,
    password: str,
    start_date: date,
    account_existed: bool,
    login_url: str,
) -> str:
    """Welcome e-mail with login credentials after a contract is accepted"""
    if account_existed:
        status_text = "Ihr Arbeitsvertrag wurde angenommen - Ihre Zugangsdaten wurden aktualisiert"
        welcome_text = (
            "Ihr Arbeitsvertrag wurde angenommen. Da bereits ein Konto mit Ihrer E-Mail-Adresse "
            "existiert, haben wir Ihr Passwort aktualisiert."
        )
    else:
        status_text = "Ihr Arbeitsvertrag wurde angenommen und Ihr Konto wurde erstellt"
        welcome_text = (
            "Herzlichen Glückwunsch! Ihr Arbeitsvertrag wurde angenommen und wir haben ein "
            "Mitarbeiterkonto für Sie eingerichtet."
        )

    content = f"""
    {_greeting(first_name, last_name)}
    <mj-text>{welcome_text}</mj-text>
    <mj-text><strong>Ihr Startdatum:</strong> {format_german_date(start_date, False)}</mj-text>
    <mj-text container-background-color="{THEME['background']}" padding="20px 25px">
      <strong>🔐 Ihre Zugangsdaten</strong><br/>
      E-Mail-Adresse: <strong>{escape_html(email)}</strong><br/>
      Passwort: <strong style="font-family: monospace;">{escape_html(password)}</strong>
    </mj-text>
    <mj-text container-background-color="{THEME['warning_bg']}" color="{THEME['warning_text']}" padding="20px 25px">
      <strong>⚠️ Wichtige Sicherheitshinweise</strong><br/>
      • Bitte ändern Sie Ihr Passwort nach der ersten Anmeldung<br/>
      • Teilen Sie Ihre Zugangsdaten niemals mit anderen<br/>
      • Bewahren Sie diese E-Mail sicher auf
    </mj-text>
    <mj-text>
      Wir freuen uns darauf, mit Ihnen zu arbeiten und heißen Sie herzlich in unserem Team willkommen!
    </mj-text>
    {_signature("Das HR-Team")}
    """

    return get_base_template(
        title="🎉 Willkommen im Team!",
        preview_text=status_text,
        content_sections=content,
        cta_url=login_url,
        cta_label="Jetzt anmelden",
        subtitle=status_text,
    )
