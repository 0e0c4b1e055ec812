"""Message formatters - render an EnrichedVisit for each notification sink.

Formatters are pure functions of the visit (plus the current time) so
they can be tested without any network access.
"""

import re
from datetime import datetime, timezone
from html import escape
from typing import Any, Dict, List, Optional, Tuple

from visitor_tracker.common.constants import NotificationConstants
from visitor_tracker.data.schemas.geo import GeoInfo
from visitor_tracker.data.schemas.visitor import EnrichedVisit

THREAT_EMOJIS = {
    "Low": "🟢",
    "Medium": "🟡",
    "High": "🔴",
    "Critical": "🚨",
    "Unknown": "⚪",
}

# Characters Telegram legacy Markdown treats as entity delimiters
MARKDOWN_SPECIAL = re.compile(r"([_*`\[])")

# Discord embed colours
COLOR_OK = 0x00FF00
COLOR_WARNING = 0xFFA500
COLOR_DANGER = 0xFF0000


def threat_emoji(level: Optional[str]) -> str:
    return THREAT_EMOJIS.get(level or "", THREAT_EMOJIS["Unknown"])


def assess_risk_level(geo: GeoInfo) -> str:
    """Coarse risk label from proxy, VPN, hosting and malicious flags."""
    risk = "Low"
    if geo.is_proxy or geo.threat_info.is_vpn:
        risk = "Medium"
    if geo.is_hosting and geo.is_proxy:
        risk = "High"
    if geo.threat_info.is_malicious:
        risk = "Critical"
    return f"{threat_emoji(risk)} {risk}"


def _md(value: Any) -> str:
    """Escape a value for plain text in a legacy Markdown message."""
    return MARKDOWN_SPECIAL.sub(r"\\\1", str(value))


def _code(value: Any) -> str:
    """Wrap a value in a code span; backticks cannot be escaped inside one."""
    return "`" + str(value).replace("`", "'") + "`"


def _truncate(text: str, limit: int) -> str:
    return text[:limit] + ("..." if len(text) > limit else "")


def _split_coordinates(coordinates: str) -> Tuple[str, str]:
    lat, _, lon = coordinates.partition(",")
    return lat.strip(), lon.strip()


def _map_links(geo: GeoInfo) -> Dict[str, str]:
    lat, lon = _split_coordinates(geo.coordinates)
    return {
        "google": f"https://www.google.com/maps?q={geo.coordinates}",
        "osm": f"https://www.openstreetmap.org/?mlat={lat}&mlon={lon}&zoom=12",
        "weather": f"https://wttr.in/{geo.city}",
    }


def _now_iso(now: Optional[datetime]) -> str:
    return (now or datetime.now(timezone.utc)).isoformat()


def build_telegram_message(visit: EnrichedVisit, now: Optional[datetime] = None) -> str:
    """Markdown report for the Telegram Bot API."""
    visitor, geo, device, session = visit.visitor, visit.geo, visit.device, visit.session
    threat = geo.threat_info
    
    flags = []
    if geo.is_proxy:
        flags.append("🛡️ Proxy")
    if threat.is_vpn:
        flags.append("🔒 VPN")
    if geo.is_hosting:
        flags.append("🏢 Hosting")
    if geo.is_mobile:
        flags.append("📱 Mobile")
    security_flags = " • ".join(flags) if flags else "✅ Clean"
    
    status = "🆕" if visitor.is_unique else "🔄"
    level_emoji = threat_emoji(threat.threat_level)
    user_agent = _truncate(visitor.user_agent, NotificationConstants.TELEGRAM_USER_AGENT_LIMIT)
    
    sections = [
        f"{status} *ADVANCED VISITOR DETECTION* {level_emoji}",
        "\n".join([
            "🌍 *Geographic Intelligence*",
            f"├ Country: {_md(geo.country)}",
            f"├ Region: {_md(geo.region)} ({_md(geo.region_code)})",
            f"├ City: {_md(geo.city)}",
            f"├ District: {_md(geo.district)}",
            f"├ Postal Code: {_md(geo.zip)}",
            f"├ Coordinates: {_code(geo.coordinates)}",
            f"├ Timezone: {_md(geo.timezone)}",
            f"├ UTC Offset: {_md(geo.utc_offset)}",
            f"├ Currency: {_md(geo.currency)}",
            f"└ Languages: {_md(geo.languages)}",
        ]),
        "\n".join([
            "📱 *Device Intelligence*",
            f"├ Operating System: {_md(device.os)}",
            f"├ Browser: {_md(device.browser)}",
            f"├ Rendering Engine: {_md(device.engine)}",
            f"├ CPU Architecture: {_md(device.cpu)}",
            f"├ Device Type: {_md(device.device)}",
            f"├ Accept Languages: {_md(visitor.languages)}",
            f"└ Mobile Device: {'✅ Yes' if geo.is_mobile else '❌ No'}",
        ]),
        "\n".join([
            "🌐 *Network Intelligence*",
            f"├ IP Address: {_code(visitor.ip)}",
            f"├ Internet Provider: {_md(geo.isp)}",
            f"├ Organization: {_md(geo.org)}",
            f"├ ASN: {_md(geo.asn)}",
            f"├ ASN Organization: {_md(geo.asn_org)}",
            f"├ Connection Type: {_md(geo.connection)}",
            f"└ Visitor Hash: {_code(session.visitor_hash)}",
        ]),
        "\n".join([
            "🔐 *Security Analysis*",
            f"├ Security Flags: {security_flags}",
            f"├ Threat Level: {level_emoji} {threat.threat_level}",
            f"├ Reputation Score: {threat.reputation}",
            f"├ VPN Detection: {'⚠️ Detected' if threat.is_vpn else '✅ Clean'}",
            f"├ Proxy Detection: {'⚠️ Detected' if geo.is_proxy else '✅ Clean'}",
            f"├ Hosting Service: {'⚠️ Yes' if geo.is_hosting else '✅ No'}",
            f"├ Trust Level: {session.trust_level} ({session.trust_score})",
            f"└ Risk Assessment: {assess_risk_level(geo)}",
        ]),
        "\n".join([
            "📊 *Session Intelligence*",
            f"├ HTTP Method: {_md(visitor.method)}",
            f"├ Protocol: {_md(visitor.protocol)}",
            f"├ Referrer Source: {_md(visitor.referrer)}",
            f"├ Session Type: {session.session_type}",
            f"├ Visit Status: {'🆕 First Visit' if visitor.is_unique else '🔄 Returning Visitor'}",
            f"├ Visit Count: {visitor.visit_count}",
            f"├ Local Time: {visitor.time}",
            f"├ Request ID: {_code(visitor.request_id)}",
            f"└ Fingerprint: {_code(session.fingerprint)}",
        ]),
        "\n".join([
            "🔧 *Technical Details*",
            f"├ User Agent: {_code(user_agent)}",
            f"├ Content Types: {_md(visitor.accept_types)}",
            f"├ Encoding Support: {_md(visitor.accept_encoding)}",
            f"├ Cache Control: {_md(visitor.cache_control or 'Not specified')}",
            f"└ Connection: {_md(visitor.connection or 'Standard')}",
        ]),
    ]
    
    if geo.has_coordinates:
        links = _map_links(geo)
        sections.append("\n".join([
            "🗺️ *Location Services*",
            f"├ [Google Maps]({links['google']})",
            f"├ [OpenStreetMap]({links['osm']})",
            f"└ [Weather Info]({links['weather']})",
        ]))
    
    sections.append(f"⏰ *Timestamp: {_now_iso(now)}*")
    return "\n\n".join(sections)


def _embed_color(visit: EnrichedVisit) -> int:
    if visit.visitor.is_unique:
        return COLOR_OK
    level = visit.geo.threat_info.threat_level
    if level in ("High", "Critical"):
        return COLOR_DANGER
    if level == "Medium":
        return COLOR_WARNING
    return COLOR_OK


def build_discord_embed(visit: EnrichedVisit, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Discord webhook body: ``{"embeds": [embed]}``."""
    visitor, geo, device, session = visit.visitor, visit.geo, visit.device, visit.session
    threat = geo.threat_info
    now = now or datetime.now(timezone.utc)
    user_agent = _truncate(visitor.user_agent, NotificationConstants.DISCORD_USER_AGENT_LIMIT)
    
    fields: List[Dict[str, Any]] = [
        {
            "name": "🌐 Geographic Information",
            "value": (
                f"**Country:** {geo.country} ({geo.country_code})\n"
                f"**Region:** {geo.region} ({geo.region_code})\n"
                f"**City:** {geo.city}\n"
                f"**District:** {geo.district}\n"
                f"**ZIP:** {geo.zip}\n"
                f"**Coordinates:** {geo.coordinates}\n"
                f"**Timezone:** {geo.timezone} (UTC{geo.utc_offset})"
            ),
            "inline": True,
        },
        {
            "name": "📱 Device & Browser",
            "value": (
                f"**OS:** {device.os} ({device.cpu})\n"
                f"**Browser:** {device.browser}\n"
                f"**Engine:** {device.engine}\n"
                f"**Device:** {device.device}\n"
                f"**Mobile:** {'📱 Yes' if geo.is_mobile else '🖥️ No'}\n"
                f"**Languages:** {visitor.languages}"
            ),
            "inline": True,
        },
        {
            "name": "🌍 Network Details",
            "value": (
                f"**IP:** `{visitor.ip}`\n"
                f"**ISP:** {geo.isp}\n"
                f"**Organization:** {geo.org}\n"
                f"**ASN:** {geo.asn}\n"
                f"**Connection:** {geo.connection}\n"
                f"**Hash:** `{session.visitor_hash}`"
            ),
            "inline": False,
        },
        {
            "name": "🔍 Security Analysis",
            "value": (
                f"**Proxy:** {'⚠️ Detected' if geo.is_proxy else '✅ None'}\n"
                f"**VPN:** {'⚠️ Detected' if threat.is_vpn else '✅ None'}\n"
                f"**Hosting:** {'⚠️ Yes' if geo.is_hosting else '✅ No'}\n"
                f"**Threat Level:** {threat_emoji(threat.threat_level)} {threat.threat_level}\n"
                f"**Reputation:** {threat.reputation}\n"
                f"**Trust:** {session.trust_level}"
            ),
            "inline": True,
        },
        {
            "name": "📊 Session Information",
            "value": (
                f"**Referrer:** {visitor.referrer}\n"
                f"**Method:** {visitor.method}\n"
                f"**Protocol:** {visitor.protocol}\n"
                f"**Time:** {visitor.time}\n"
                f"**Status:** {'🆕 New' if visitor.is_unique else '🔄 Returning'}\n"
                f"**Session:** {session.session_type}"
            ),
            "inline": True,
        },
        {
            "name": "🔧 Technical Details",
            "value": (
                f"**User Agent:** `{user_agent}`\n"
                f"**Accept:** {visitor.accept_types}\n"
                f"**Encoding:** {visitor.accept_encoding}\n"
                f"**Request ID:** `{visitor.request_id}`"
            ),
            "inline": False,
        },
    ]
    
    if geo.has_coordinates:
        links = _map_links(geo)
        fields.append({
            "name": "🗺️ Location Services",
            "value": f"[Google Maps]({links['google']}) • [OpenStreetMap]({links['osm']})",
            "inline": False,
        })
    
    embed = {
        "title": "🔥 New Visitor Detection",
        "color": _embed_color(visit),
        "timestamp": now.isoformat(),
        "thumbnail": {"url": NotificationConstants.THUMBNAIL_URL},
        "fields": fields,
        "footer": {
            "text": (
                f"{NotificationConstants.TRACKER_NAME} {NotificationConstants.TRACKER_VERSION}"
                f" • {now.strftime('%Y-%m-%d %H:%M:%S %Z')}"
            ),
            "icon_url": NotificationConstants.AVATAR_URL,
        },
    }
    
    return {"embeds": [embed]}


def build_email_subject(visit: EnrichedVisit) -> str:
    geo = visit.geo
    return f"🔥 New Visitor: {geo.city}, {geo.country} - {visit.device.device}"


def build_email_html(visit: EnrichedVisit, now: Optional[datetime] = None) -> str:
    """HTML report for the email service. Every interpolated value is escaped."""
    visitor, geo, device, session = visit.visitor, visit.geo, visit.device, visit.session
    threat = geo.threat_info
    
    def e(value: Any) -> str:
        return escape(str(value))
    
    geo_class = "danger" if threat.threat_level in ("High", "Critical") else "success"
    security_class = "alert" if (geo.is_proxy or threat.is_vpn) else "success"
    
    return f"""<!DOCTYPE html>
<html>
<head>
<meta charset="UTF-8">
<style>
    body {{ font-family: Arial, sans-serif; background-color: #f4f4f4; margin: 0; padding: 20px; }}
    .container {{ max-width: 800px; margin: 0 auto; background: white; border-radius: 10px; overflow: hidden; }}
    .header {{ background: linear-gradient(135deg, #667eea 0%, #764ba2 100%); color: white; padding: 20px; text-align: center; }}
    .content {{ padding: 20px; }}
    .info-block {{ background: #f8f9fa; border-left: 4px solid #007bff; margin: 10px 0; padding: 15px; border-radius: 5px; }}
    .alert {{ background: #fff3cd; border-left-color: #ffc107; color: #856404; }}
    .danger {{ background: #f8d7da; border-left-color: #dc3545; color: #721c24; }}
    .success {{ background: #d4edda; border-left-color: #28a745; color: #155724; }}
    .footer {{ background: #343a40; color: white; padding: 15px; text-align: center; font-size: 12px; }}
</style>
</head>
<body>
<div class="container">
    <div class="header">
        <h1>🔥 Visitor Detection Alert</h1>
        <p>A new visitor has been detected</p>
    </div>
    <div class="content">
        <div class="info-block {geo_class}">
            <h3>🌍 Geographic Information</h3>
            <p><strong>Location:</strong> {e(geo.city)}, {e(geo.region)}, {e(geo.country)}</p>
            <p><strong>Coordinates:</strong> {e(geo.coordinates)}</p>
            <p><strong>ISP:</strong> {e(geo.isp)}</p>
            <p><strong>Timezone:</strong> {e(geo.timezone)}</p>
        </div>
        <div class="info-block">
            <h3>📱 Device Information</h3>
            <p><strong>Device:</strong> {e(device.device)}</p>
            <p><strong>Browser:</strong> {e(device.browser)}</p>
            <p><strong>Operating System:</strong> {e(device.os)}</p>
            <p><strong>Languages:</strong> {e(visitor.languages)}</p>
        </div>
        <div class="info-block {security_class}">
            <h3>🔐 Security Analysis</h3>
            <p><strong>IP Address:</strong> {e(visitor.ip)}</p>
            <p><strong>Threat Level:</strong> {e(threat.threat_level)}</p>
            <p><strong>VPN Detected:</strong> {'Yes ⚠️' if threat.is_vpn else 'No ✅'}</p>
            <p><strong>Proxy Detected:</strong> {'Yes ⚠️' if geo.is_proxy else 'No ✅'}</p>
            <p><strong>Trust Level:</strong> {e(session.trust_level)}</p>
            <p><strong>Visitor Hash:</strong> {e(session.visitor_hash)}</p>
        </div>
        <div class="info-block">
            <h3>📊 Visit Details</h3>
            <p><strong>First Visit:</strong> {'Yes 🆕' if visitor.is_unique else 'No 🔄'}</p>
            <p><strong>Referrer:</strong> {e(visitor.referrer)}</p>
            <p><strong>Time:</strong> {e(visitor.time)}</p>
            <p><strong>Request ID:</strong> {e(visitor.request_id)}</p>
        </div>
    </div>
    <div class="footer">
        <p>{NotificationConstants.TRACKER_NAME} {NotificationConstants.TRACKER_VERSION} • Generated at {_now_iso(now)}</p>
    </div>
</div>
</body>
</html>
"""


def build_datastore_entry(visit: EnrichedVisit) -> Dict[str, Any]:
    """JSON log record for the external datastore."""
    visitor, geo, device, session = visit.visitor, visit.geo, visit.device, visit.session
    threat = geo.threat_info
    
    return {
        "timestamp": visitor.timestamp,
        "requestId": visitor.request_id,
        "visitor": {
            "ip": visitor.ip,
            "userAgent": visitor.user_agent,
            "fingerprint": session.fingerprint,
            "hash": session.visitor_hash,
            "isUnique": visitor.is_unique,
            "visitCount": visitor.visit_count,
        },
        "location": {
            "country": geo.country,
            "countryCode": geo.country_code,
            "region": geo.region,
            "city": geo.city,
            "coordinates": geo.coordinates,
            "timezone": geo.timezone,
            "isp": geo.isp,
        },
        "device": {
            "os": device.os,
            "browser": device.browser,
            "device": device.device,
            "mobile": geo.is_mobile,
        },
        "security": {
            "threatLevel": threat.threat_level,
            "isProxy": geo.is_proxy,
            "isVPN": threat.is_vpn,
            "isHosting": geo.is_hosting,
            "trustLevel": session.trust_level,
        },
        "session": {
            "referrer": visitor.referrer,
            "method": visitor.method,
            "protocol": visitor.protocol,
            "languages": visitor.languages,
        },
    }
