"""Team identifier canonicalization.

Every source spells teams its own way: PickFinder uses short codes ("TB",
"LA"), PrizePicks mixes in legacy codes, Underdog cards carry full names.
``canon_team`` folds all of them onto one ``TeamCode`` value.
"""

from typing import Any, Dict, Optional

from loguru import logger

from propdefense.models.enums import TeamCode

# Key: alias after _alias_key(), Value: canonical code
TEAM_ALIASES: Dict[str, str] = {
    # Anaheim
    "ANA": TeamCode.ANA.value,
    "ANAHEIM": TeamCode.ANA.value,
    "DUCKS": TeamCode.ANA.value,
    "ANAHEIM DUCKS": TeamCode.ANA.value,
    "MIGHTY DUCKS": TeamCode.ANA.value,
    # Boston
    "BOS": TeamCode.BOS.value,
    "BOSTON": TeamCode.BOS.value,
    "BRUINS": TeamCode.BOS.value,
    "BOSTON BRUINS": TeamCode.BOS.value,
    # Buffalo
    "BUF": TeamCode.BUF.value,
    "BUFFALO": TeamCode.BUF.value,
    "SABRES": TeamCode.BUF.value,
    "BUFFALO SABRES": TeamCode.BUF.value,
    # Carolina (Hartford relocated)
    "CAR": TeamCode.CAR.value,
    "CAROLINA": TeamCode.CAR.value,
    "HURRICANES": TeamCode.CAR.value,
    "CAROLINA HURRICANES": TeamCode.CAR.value,
    "HFD": TeamCode.CAR.value,
    "HAR": TeamCode.CAR.value,
    # Columbus
    "CBJ": TeamCode.CBJ.value,
    "CLB": TeamCode.CBJ.value,
    "CLS": TeamCode.CBJ.value,
    "COB": TeamCode.CBJ.value,
    "COLUMBUS": TeamCode.CBJ.value,
    "BLUE JACKETS": TeamCode.CBJ.value,
    "COLUMBUS BLUE JACKETS": TeamCode.CBJ.value,
    # Calgary
    "CGY": TeamCode.CGY.value,
    "CAL": TeamCode.CGY.value,
    "CALGARY": TeamCode.CGY.value,
    "FLAMES": TeamCode.CGY.value,
    "CALGARY FLAMES": TeamCode.CGY.value,
    # Chicago
    "CHI": TeamCode.CHI.value,
    "CHICAGO": TeamCode.CHI.value,
    "BLACKHAWKS": TeamCode.CHI.value,
    "CHICAGO BLACKHAWKS": TeamCode.CHI.value,
    # Colorado (Quebec relocated)
    "COL": TeamCode.COL.value,
    "COLORADO": TeamCode.COL.value,
    "AVALANCHE": TeamCode.COL.value,
    "COLORADO AVALANCHE": TeamCode.COL.value,
    "QUE": TeamCode.COL.value,
    # Dallas
    "DAL": TeamCode.DAL.value,
    "DALLAS": TeamCode.DAL.value,
    "STARS": TeamCode.DAL.value,
    "DALLAS STARS": TeamCode.DAL.value,
    # Detroit
    "DET": TeamCode.DET.value,
    "DETROIT": TeamCode.DET.value,
    "RED WINGS": TeamCode.DET.value,
    "DETROIT RED WINGS": TeamCode.DET.value,
    # Edmonton
    "EDM": TeamCode.EDM.value,
    "EDMONTON": TeamCode.EDM.value,
    "OILERS": TeamCode.EDM.value,
    "EDMONTON OILERS": TeamCode.EDM.value,
    # Florida
    "FLA": TeamCode.FLA.value,
    "FLO": TeamCode.FLA.value,
    "FLORIDA": TeamCode.FLA.value,
    "PANTHERS": TeamCode.FLA.value,
    "FLORIDA PANTHERS": TeamCode.FLA.value,
    # Los Angeles
    "LAK": TeamCode.LAK.value,
    "LA": TeamCode.LAK.value,
    "LOS ANGELES": TeamCode.LAK.value,
    "KINGS": TeamCode.LAK.value,
    "LA KINGS": TeamCode.LAK.value,
    "LOS ANGELES KINGS": TeamCode.LAK.value,
    # Minnesota
    "MIN": TeamCode.MIN.value,
    "MINNESOTA": TeamCode.MIN.value,
    "WILD": TeamCode.MIN.value,
    "MINNESOTA WILD": TeamCode.MIN.value,
    # Montreal
    "MTL": TeamCode.MTL.value,
    "MON": TeamCode.MTL.value,
    "MTR": TeamCode.MTL.value,
    "MONTREAL": TeamCode.MTL.value,
    "MONTRÉAL": TeamCode.MTL.value,
    "CANADIENS": TeamCode.MTL.value,
    "MONTREAL CANADIENS": TeamCode.MTL.value,
    "MONTRÉAL CANADIENS": TeamCode.MTL.value,
    # New Jersey
    "NJD": TeamCode.NJD.value,
    "NJ": TeamCode.NJD.value,
    "NEW JERSEY": TeamCode.NJD.value,
    "DEVILS": TeamCode.NJD.value,
    "NEW JERSEY DEVILS": TeamCode.NJD.value,
    # Nashville
    "NSH": TeamCode.NSH.value,
    "NAS": TeamCode.NSH.value,
    "NASHVILLE": TeamCode.NSH.value,
    "PREDATORS": TeamCode.NSH.value,
    "NASHVILLE PREDATORS": TeamCode.NSH.value,
    # NY Islanders
    "NYI": TeamCode.NYI.value,
    "ISLANDERS": TeamCode.NYI.value,
    "NY ISLANDERS": TeamCode.NYI.value,
    "NEW YORK ISLANDERS": TeamCode.NYI.value,
    # NY Rangers
    "NYR": TeamCode.NYR.value,
    "RANGERS": TeamCode.NYR.value,
    "NY RANGERS": TeamCode.NYR.value,
    "NEW YORK RANGERS": TeamCode.NYR.value,
    # Ottawa
    "OTT": TeamCode.OTT.value,
    "OTTAWA": TeamCode.OTT.value,
    "SENATORS": TeamCode.OTT.value,
    "OTTAWA SENATORS": TeamCode.OTT.value,
    # Philadelphia
    "PHI": TeamCode.PHI.value,
    "PHILADELPHIA": TeamCode.PHI.value,
    "FLYERS": TeamCode.PHI.value,
    "PHILADELPHIA FLYERS": TeamCode.PHI.value,
    # Pittsburgh
    "PIT": TeamCode.PIT.value,
    "PITTSBURGH": TeamCode.PIT.value,
    "PENGUINS": TeamCode.PIT.value,
    "PITTSBURGH PENGUINS": TeamCode.PIT.value,
    # Seattle
    "SEA": TeamCode.SEA.value,
    "SEATTLE": TeamCode.SEA.value,
    "KRAKEN": TeamCode.SEA.value,
    "SEATTLE KRAKEN": TeamCode.SEA.value,
    # San Jose
    "SJS": TeamCode.SJS.value,
    "SJ": TeamCode.SJS.value,
    "SAN JOSE": TeamCode.SJS.value,
    "SHARKS": TeamCode.SJS.value,
    "SAN JOSE SHARKS": TeamCode.SJS.value,
    # St. Louis
    "STL": TeamCode.STL.value,
    "ST LOUIS": TeamCode.STL.value,
    "SAINT LOUIS": TeamCode.STL.value,
    "BLUES": TeamCode.STL.value,
    "ST LOUIS BLUES": TeamCode.STL.value,
    # Tampa Bay
    "TBL": TeamCode.TBL.value,
    "TB": TeamCode.TBL.value,
    "TBY": TeamCode.TBL.value,
    "TAM": TeamCode.TBL.value,
    "TAMPA": TeamCode.TBL.value,
    "TAMPA BAY": TeamCode.TBL.value,
    "LIGHTNING": TeamCode.TBL.value,
    "TAMPA BAY LIGHTNING": TeamCode.TBL.value,
    # Toronto
    "TOR": TeamCode.TOR.value,
    "TORONTO": TeamCode.TOR.value,
    "MAPLE LEAFS": TeamCode.TOR.value,
    "LEAFS": TeamCode.TOR.value,
    "TORONTO MAPLE LEAFS": TeamCode.TOR.value,
    # Utah (Arizona / Phoenix relocated)
    "UTA": TeamCode.UTA.value,
    "UTAH": TeamCode.UTA.value,
    "UTAH HC": TeamCode.UTA.value,
    "UTAH HOCKEY CLUB": TeamCode.UTA.value,
    "MAMMOTH": TeamCode.UTA.value,
    "UTAH MAMMOTH": TeamCode.UTA.value,
    "ARI": TeamCode.UTA.value,
    "ARZ": TeamCode.UTA.value,
    "ARIZONA": TeamCode.UTA.value,
    "COYOTES": TeamCode.UTA.value,
    "ARIZONA COYOTES": TeamCode.UTA.value,
    "PHX": TeamCode.UTA.value,
    "PHOENIX": TeamCode.UTA.value,
    "PHOENIX COYOTES": TeamCode.UTA.value,
    # Vancouver
    "VAN": TeamCode.VAN.value,
    "VANCOUVER": TeamCode.VAN.value,
    "CANUCKS": TeamCode.VAN.value,
    "VANCOUVER CANUCKS": TeamCode.VAN.value,
    # Vegas
    "VGK": TeamCode.VGK.value,
    "VEG": TeamCode.VGK.value,
    "LV": TeamCode.VGK.value,
    "LVK": TeamCode.VGK.value,
    "VEGAS": TeamCode.VGK.value,
    "LAS VEGAS": TeamCode.VGK.value,
    "GOLDEN KNIGHTS": TeamCode.VGK.value,
    "VEGAS GOLDEN KNIGHTS": TeamCode.VGK.value,
    # Winnipeg (Atlanta relocated)
    "WPG": TeamCode.WPG.value,
    "WIN": TeamCode.WPG.value,
    "WINNIPEG": TeamCode.WPG.value,
    "JETS": TeamCode.WPG.value,
    "WINNIPEG JETS": TeamCode.WPG.value,
    "ATL": TeamCode.WPG.value,
    "ATLANTA": TeamCode.WPG.value,
    "THRASHERS": TeamCode.WPG.value,
    "ATLANTA THRASHERS": TeamCode.WPG.value,
    # Washington
    "WSH": TeamCode.WSH.value,
    "WAS": TeamCode.WSH.value,
    "WASHINGTON": TeamCode.WSH.value,
    "CAPITALS": TeamCode.WSH.value,
    "WASHINGTON CAPITALS": TeamCode.WSH.value,
}


# Short aliases that collide with ordinary card text ("MON 7:00 PM", "WIN")
_FREE_TEXT_EXCLUDED = {"MON", "WIN", "CAL", "TAM", "HAR", "QUE", "COB", "FLO"}


def _alias_key(raw: str) -> str:
    # "St. Louis" and "L.A." style punctuation never distinguishes two teams
    return " ".join(raw.upper().replace(".", " ").split())


def _as_text(raw: Any) -> str:
    if raw is None:
        return ""
    if isinstance(raw, TeamCode):
        return raw.value
    return str(raw)


def canon_team(raw: Any) -> str:
    """Maps any team spelling to its canonical code.

    Lookup is case-insensitive and whitespace-trimmed. Unknown input is
    returned uppercased and trimmed. Never raises.
    """
    text = _as_text(raw).strip()
    canonical = TEAM_ALIASES.get(_alias_key(text))
    if canonical is not None:
        return canonical
    if text:
        logger.trace(f"Team alias miss, passing through: '{text}'")
    return text.upper()


def is_known_team(raw: Any) -> bool:
    return _alias_key(_as_text(raw)) in TEAM_ALIASES


def find_team_codes(text: Optional[str]) -> list[str]:
    """Canonical codes of every team abbreviation found in free text, in order of appearance."""
    if not text:
        return []
    codes: list[str] = []
    for token in text.replace("@", " @ ").split():
        token = token.strip(".,;:()[]")
        if len(token) < 2 or len(token) > 4 or not token.isalpha() or not token.isupper():
            continue
        if token in _FREE_TEXT_EXCLUDED:
            continue
        canonical = TEAM_ALIASES.get(token)
        if canonical and canonical not in codes:
            codes.append(canonical)
    return codes
