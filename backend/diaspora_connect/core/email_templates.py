"""Email Templates: HTML bodies for welcome and staff-authored emails.

Invariants:
    - User-provided text (names, subject, body) is HTML-escaped
    - Custom email bodies keep line breaks as <br />
"""

from html import escape

_FONT_STACK = (
    "-apple-system,BlinkMacSystemFont,'Segoe UI',Roboto,'Helvetica Neue',Arial,sans-serif"
)
_PARAGRAPH = "color:#475569;font-size:15px;line-height:1.7;margin:0 0 20px;"
_BULLET_ROW = (
    '<tr><td style="padding:8px 0;border-bottom:1px solid #f1f5f9;">'
    '<span style="padding-right:12px;color:#10b981;font-size:16px;">&#8226;</span>'
    '<span style="color:#334155;font-size:14px;line-height:1.6;">{text}</span>'
    "</td></tr>"
)
WELCOME_BULLETS = (
    "Access expert-verified guides on investment, banking, and property",
    "Connect with trusted, vetted service providers",
    "Navigate legal, citizenship, and pension matters with confidence",
    "Participate in civic engagement and national development from abroad",
)


def first_name(name: str) -> str:
    parts = name.split()
    return parts[0] if parts else name


def _site_label(app_url: str) -> str:
    return app_url.replace("https://", "").replace("http://", "")


def _layout(*, title: str, app_name: str, header_extra: str, body: str, footer: str) -> str:
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1.0" />
  <title>{title}</title>
</head>
<body style="margin:0;padding:0;background-color:#f8fafc;font-family:{_FONT_STACK};">
  <table role="presentation" width="100%" cellpadding="0" cellspacing="0" style="background-color:#f8fafc;padding:40px 20px;">
    <tr><td align="center">
      <table role="presentation" width="600" cellpadding="0" cellspacing="0" style="max-width:600px;width:100%;">
        <tr>
          <td style="background-color:#0f172a;border-radius:12px 12px 0 0;padding:32px 40px;text-align:center;">
            <div style="display:inline-block;background:#ffffff;border-radius:12px;width:60px;height:60px;line-height:60px;text-align:center;font-weight:800;font-size:24px;color:#0f172a;">DC</div>
            <h1 style="color:#ffffff;font-size:22px;margin:16px 0 0;font-weight:700;">{escape(app_name)}</h1>
            {header_extra}
          </td>
        </tr>
        <tr><td style="background-color:#ffffff;padding:40px;">{body}</td></tr>
        <tr>
          <td style="background-color:#f1f5f9;border-radius:0 0 12px 12px;padding:24px 40px;text-align:center;">
            {footer}
          </td>
        </tr>
      </table>
    </td></tr>
  </table>
</body>
</html>"""


def _copyright(app_name: str, year: int) -> str:
    return (
        '<p style="color:#94a3b8;font-size:11px;margin:0;">'
        f"&copy; {year} {escape(app_name)}. All rights reserved.</p>"
    )


def build_welcome_email_html(*, name: str, app_name: str, app_url: str, year: int) -> str:
    """Welcome letter sent after signup."""
    bullets = "".join(_BULLET_ROW.format(text=escape(b)) for b in WELCOME_BULLETS)
    body = f"""
<p style="{_PARAGRAPH}">Dear <strong style="color:#0f172a;">{escape(name)}</strong>,</p>
<p style="{_PARAGRAPH}">Thank you for joining <strong>{escape(app_name)} (DC)</strong>.</p>
<p style="{_PARAGRAPH}">By choosing to become part of this Platform, you have joined a community committed to a simple but profound mission: <strong style="color:#0f172a;">connecting Zimbabwe and its global diaspora for structured, scalable national development.</strong></p>
<p style="{_PARAGRAPH}">DC is a digital platform designed to connect Zimbabwe and its global diaspora through trusted information, verified services, and structured economic and civic participation. Our content is powered by expert podcast interviews with bankers, lawyers, policymakers, investors, and industry leaders, transformed into actionable guides, directories, and services.</p>
<p style="{_PARAGRAPH}">Your membership strengthens a collective effort to:</p>
<table role="presentation" width="100%" cellpadding="0" cellspacing="0" style="margin:0 0 24px;">{bullets}</table>
<p style="{_PARAGRAPH}">We encourage you to stay engaged, participate in programmes and dialogues in your community, and share accurate information from our official platforms.</p>
<p style="{_PARAGRAPH}">Your solidarity contribution of <strong style="color:#0f172a;">USD5 per month</strong> or <strong style="color:#0f172a;">USD60 per annum</strong> will help us reach as many of our compatriots at home.</p>
<p style="text-align:center;margin:0 0 28px;">
  <a href="{app_url}/membership-application" style="display:inline-block;background-color:#0f172a;color:#ffffff;font-size:14px;font-weight:600;padding:14px 32px;border-radius:8px;text-decoration:none;">Apply for Membership &rarr;</a>
</p>
<p style="color:#475569;font-size:15px;line-height:1.7;margin:0 0 4px;">Warm regards,</p>
<p style="color:#0f172a;font-size:15px;line-height:1.5;margin:0 0 2px;"><strong>Senator Jameson Zvidzai Timba</strong></p>
<p style="color:#64748b;font-size:13px;line-height:1.5;margin:0;">Convenor, {escape(app_name)} (DC)</p>
"""
    footer = (
        '<p style="color:#64748b;font-size:12px;line-height:1.5;margin:0 0 8px;">'
        "You're receiving this email because you signed up at "
        f'<a href="{app_url}" style="color:#0f172a;text-decoration:underline;">{_site_label(app_url)}</a></p>'
        + _copyright(app_name, year)
    )
    header_extra = (
        '<p style="color:#94a3b8;font-size:13px;margin:6px 0 0;">'
        "Zimbabwe's Diaspora Intelligence Platform</p>"
    )
    return _layout(
        title=f"Welcome to {escape(app_name)}",
        app_name=app_name,
        header_extra=header_extra,
        body=body,
        footer=footer,
    )


def build_custom_email_html(
    *, name: str, subject: str, body: str, app_name: str, app_url: str, year: int,
) -> str:
    """Staff-authored plain-text message wrapped in the branded layout."""
    html_body = escape(body).replace("\n", "<br />")
    content = f"""
<p style="{_PARAGRAPH}">Dear <strong style="color:#0f172a;">{escape(name)}</strong>,</p>
<div style="color:#475569;font-size:15px;line-height:1.7;margin:0 0 24px;">{html_body}</div>
<p style="color:#475569;font-size:15px;line-height:1.7;margin:0 0 4px;">Warm regards,</p>
<p style="color:#0f172a;font-size:15px;line-height:1.5;margin:0 0 2px;"><strong>{escape(app_name)}</strong></p>
<p style="color:#64748b;font-size:13px;line-height:1.5;margin:0;"><a href="{app_url}" style="color:#0f172a;text-decoration:underline;">{_site_label(app_url)}</a></p>
"""
    return _layout(
        title=escape(subject),
        app_name=app_name,
        header_extra="",
        body=content,
        footer=_copyright(app_name, year),
    )
