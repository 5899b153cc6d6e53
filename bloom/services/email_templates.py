"""
Email templates: transactional mails and the lead nurture sequence

Every template returns a dict with ``html`` and ``text`` (and ``subject``
for transactional mails, nurture subjects come from the sequence).
"""
from typing import Any, Callable, Dict, Optional

DEFAULT_FIRST_NAME = "Beautiful"
SIGNATURE = "Dr. Sidra Bukhari, MRCPsych (UK)"

_WRAPPER = '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">{body}</div>'
_BUTTON = ('<a href="{href}" style="background: #9333ea; color: white; padding: 15px 30px; '
           'text-decoration: none; border-radius: 5px; display: inline-block; margin: 20px 0;">{label}</a>')


def _html(body: str) -> str:
    return _WRAPPER.format(body=body)


def _button(href: str, label: str) -> str:
    return _BUTTON.format(href=href, label=label)


def _first_name(value: Optional[str]) -> str:
    return value or DEFAULT_FIRST_NAME


# ---------------------------------------------------------------------------
# Transactional
# ---------------------------------------------------------------------------

def welcome(first_name: Optional[str]) -> Dict[str, str]:
    name = first_name or ""
    return {
        "subject": "Welcome to BloomAfter40 - Your Wellness Journey Begins!",
        "html": _html(
            f'<h1 style="color: #8B5CF6;">BloomAfter40</h1>'
            f"<h2>Welcome, {name or 'Welcome'}!</h2>"
            "<p>Thank you for joining BloomAfter40, your wellness platform for women navigating midlife transitions.</p>"
            "<ul><li>FREE comprehensive health assessments</li>"
            "<li>Mental, physical, and cognitive wellness tracking</li>"
            "<li>Premium 6-week Mind-Body Reset program</li></ul>"
            + _button("/dashboard", "Access Your Dashboard")
            + f"<p>{SIGNATURE}</p>"
        ),
        "text": (
            f"Welcome to BloomAfter40, {name}! Your wellness platform for midlife women is ready. "
            "Start with the free health assessments on your dashboard."
        ),
    }


def payment_confirmation(first_name: Optional[str], amount: float) -> Dict[str, str]:
    name = first_name or ""
    return {
        "subject": "Payment Confirmed - Full BloomAfter40 Program Unlocked!",
        "html": _html(
            f"<h2>Congratulations, {name}!</h2>"
            f"<p>Your payment of ${amount} has been successfully processed. You now have lifetime access "
            "to the complete 6-week Mind-Body Reset program.</p>"
            + _button("/coaching", "Start Your Transformation")
            + f"<p>{SIGNATURE}</p>"
        ),
        "text": (
            f"Payment confirmed! Welcome to the complete BloomAfter40 program, {name}. "
            "You now have lifetime access to the 6-week Mind-Body Reset program."
        ),
    }


def weekly_reminder(first_name: Optional[str], week_number: int, week_title: str) -> Dict[str, str]:
    name = first_name or ""
    return {
        "subject": f"Week {week_number} Reminder: {week_title} - BloomAfter40",
        "html": _html(
            f"<h2>Ready for Week {week_number}, {name}?</h2>"
            f"<p>It's time to continue your transformation journey with <strong>{week_title}</strong>.</p>"
            + _button("/coaching", "Continue Your Journey")
            + f"<p>{SIGNATURE}</p>"
        ),
        "text": (
            f"Week {week_number} reminder: {week_title}. Continue your BloomAfter40 "
            f"transformation journey today, {name}. Consistency creates lasting change."
        ),
    }


# ---------------------------------------------------------------------------
# Nurture sequence
# ---------------------------------------------------------------------------

def lead_magnet_delivery(lead: Any) -> Dict[str, str]:
    name = _first_name(getattr(lead, "first_name", None))
    return {
        "html": _html(
            f'<h1 style="color: #9333ea;">Welcome to ThriveMidlife, {name}!</h1>'
            "<p>Your journey to vibrant midlife wellness starts now.</p>"
            '<p><strong>"The 5-Day Hormone Reset Guide"</strong> is ready for you.</p>'
            + _button("/dashboard", "Download Your Guide")
            + "<p><strong>Next Step:</strong> Take your free wellness assessment for personalized recommendations.</p>"
            + _button("/dashboard", "Take My Free Assessment")
            + f"<p>To your vibrant health,<br>{SIGNATURE}</p>"
        ),
        "text": (
            f"Welcome to ThriveMidlife, {name}!\n\n"
            'Your free "5-Day Hormone Reset Guide" is ready for download.\n'
            "Visit /dashboard to access your guide and take the wellness assessment.\n\n"
            f"To your vibrant health,\n{SIGNATURE}"
        ),
    }


def assessment_reminder(lead: Any) -> Dict[str, str]:
    name = _first_name(getattr(lead, "first_name", None))
    return {
        "html": _html(
            f'<h1 style="color: #9333ea;">Quick Check-in, {name}</h1>'
            "<p>I noticed you haven't taken your wellness assessment yet. No worries, life gets busy!</p>"
            "<p><strong>You can't manage what you don't measure.</strong> It takes just 5 minutes.</p>"
            + _button("/dashboard", "Complete My Assessment")
            + "<p>Cheering you on,<br>Dr. Sidra</p>"
        ),
        "text": (
            "Quick check-in! Haven't taken your wellness assessment yet? It only takes 5 minutes "
            "and gives you personalized insights. Complete it at /dashboard"
        ),
    }


def educational_content_1(lead: Any) -> Dict[str, str]:
    name = _first_name(getattr(lead, "first_name", None))
    return {
        "html": _html(
            '<h1 style="color: #9333ea;">3 Signs Your Hormones Need Attention</h1>'
            f"<p>Hi {name},</p>"
            "<h3>Sign #1: You're Tired But Wired</h3>"
            "<p>Exhausted all day but can't fall asleep at night? That's your cortisol rhythm crying for help.</p>"
            "<h3>Sign #2: Your Mood is a Rollercoaster</h3>"
            "<p>Snapping at loved ones, then feeling guilty? It's your progesterone dropping.</p>"
            "<h3>Sign #3: Your Brain Feels Foggy</h3>"
            "<p>Forgetting words or losing focus? Estrogen decline affects your brain first.</p>"
            + _button("/coaching", "Learn More About the Program")
            + "<p>Supporting your journey,<br>Dr. Sidra</p>"
        ),
        "text": (
            "3 Signs Your Hormones Need Attention: 1) Tired but wired, 2) Mood swings, 3) Brain fog. "
            "These are all addressable! Learn more at /coaching"
        ),
    }


def educational_content_2(lead: Any) -> Dict[str, str]:
    name = _first_name(getattr(lead, "first_name", None))
    return {
        "html": _html(
            '<h1 style="color: #9333ea;">The #1 Mistake Women Make During Perimenopause</h1>'
            f"<p>Hi {name},</p>"
            "<p>Most women try to push through on willpower alone. Your nervous system needs support, "
            "not more pressure.</p>"
            + _button("/coaching", "See How the Program Helps")
            + "<p>Supporting your journey,<br>Dr. Sidra</p>"
        ),
        "text": (
            "The #1 mistake women make during perimenopause is pushing through on willpower alone. "
            "Learn a gentler approach at /coaching"
        ),
    }


def soft_pitch(lead: Any) -> Dict[str, str]:
    name = _first_name(getattr(lead, "first_name", None))
    return {
        "html": _html(
            '<h1 style="color: #9333ea;">Are You Ready to Feel Like Yourself Again?</h1>'
            f"<p>Hi {name},</p>"
            "<p><strong>How long are you willing to feel \"not quite yourself\"?</strong></p>"
            "<p>This week only, early access to the Mind-Body Reset program is $97 (normally $297).</p>"
            + _button("/checkout", "Yes, I'm Ready to Transform")
            + "<p>Here's to your vibrant next chapter,<br>Dr. Sidra Bukhari</p>"
            '<p style="font-size: 12px; color: #666;">P.S. You have a 30-day money-back guarantee.</p>'
        ),
        "text": (
            "Ready to feel like yourself again? The Mind-Body Reset program is available for $97 "
            "this week (normally $297). Start your transformation at /checkout"
        ),
    }


NURTURE_TEMPLATES: Dict[str, Callable[[Any], Dict[str, str]]] = {
    "leadMagnetDelivery": lead_magnet_delivery,
    "assessmentReminder": assessment_reminder,
    "educationalContent1": educational_content_1,
    "educationalContent2": educational_content_2,
    "softPitch": soft_pitch,
}

DEFAULT_NURTURE_TEMPLATE = "leadMagnetDelivery"


def render_nurture_template(template_type: str, lead: Any) -> Dict[str, str]:
    """Render a nurture template, falling back to lead magnet delivery for unknown types"""
    template = NURTURE_TEMPLATES.get(template_type, NURTURE_TEMPLATES[DEFAULT_NURTURE_TEMPLATE])
    return template(lead)
