"""Country-code to flag lookup."""

from typing import Optional

from visitor_tracker.common.constants import GeoConstants

COUNTRY_FLAGS = {
    "US": "🇺🇸", "GB": "🇬🇧", "CA": "🇨🇦", "AU": "🇦🇺", "DE": "🇩🇪",
    "FR": "🇫🇷", "IT": "🇮🇹", "ES": "🇪🇸", "NL": "🇳🇱", "BR": "🇧🇷",
    "IN": "🇮🇳", "CN": "🇨🇳", "JP": "🇯🇵", "KR": "🇰🇷", "RU": "🇷🇺",
    "EG": "🇪🇬", "SA": "🇸🇦", "AE": "🇦🇪", "TR": "🇹🇷", "IL": "🇮🇱",
    "MX": "🇲🇽", "AR": "🇦🇷", "CL": "🇨🇱", "CO": "🇨🇴", "PE": "🇵🇪",
    "SE": "🇸🇪", "NO": "🇳🇴", "DK": "🇩🇰", "FI": "🇫🇮", "PL": "🇵🇱",
    "CZ": "🇨🇿", "AT": "🇦🇹", "CH": "🇨🇭", "BE": "🇧🇪", "PT": "🇵🇹",
    "GR": "🇬🇷", "HU": "🇭🇺", "RO": "🇷🇴", "BG": "🇧🇬", "HR": "🇭🇷",
    "ZA": "🇿🇦", "NG": "🇳🇬", "KE": "🇰🇪", "MA": "🇲🇦", "TN": "🇹🇳",
    "TH": "🇹🇭", "VN": "🇻🇳", "SG": "🇸🇬", "MY": "🇲🇾", "ID": "🇮🇩",
    "PH": "🇵🇭", "PK": "🇵🇰", "BD": "🇧🇩", "LK": "🇱🇰", "NP": "🇳🇵",
    "UA": "🇺🇦", "BY": "🇧🇾", "KZ": "🇰🇿", "UZ": "🇺🇿", "MD": "🇲🇩",
    "IR": "🇮🇷", "IQ": "🇮🇶", "SY": "🇸🇾", "JO": "🇯🇴", "LB": "🇱🇧",
    "QA": "🇶🇦", "KW": "🇰🇼", "BH": "🇧🇭", "OM": "🇴🇲", "YE": "🇾🇪",
}


def country_flag(country_code: Optional[str]) -> str:
    """Return the flag for an ISO 3166-1 alpha-2 code, or the generic globe."""
    if not country_code:
        return GeoConstants.DEFAULT_FLAG
    return COUNTRY_FLAGS.get(country_code.upper(), GeoConstants.DEFAULT_FLAG)
