from enum import Enum

# Defense rank of a prop no ranking could be matched to
NA_RANK = "NA"


class TeamCode(str, Enum):
    ANA = "ANA"
    BOS = "BOS"
    BUF = "BUF"
    CAR = "CAR"
    CBJ = "CBJ"
    CGY = "CGY"
    CHI = "CHI"
    COL = "COL"
    DAL = "DAL"
    DET = "DET"
    EDM = "EDM"
    FLA = "FLA"
    LAK = "LAK"
    MIN = "MIN"
    MTL = "MTL"
    NJD = "NJD"
    NSH = "NSH"
    NYI = "NYI"
    NYR = "NYR"
    OTT = "OTT"
    PHI = "PHI"
    PIT = "PIT"
    SEA = "SEA"
    SJS = "SJS"
    STL = "STL"
    TBL = "TBL"
    TOR = "TOR"
    UTA = "UTA"
    VAN = "VAN"
    VGK = "VGK"
    WPG = "WPG"
    WSH = "WSH"


class StatCategory(str, Enum):
    SHOTS_ON_GOAL = "Shots on Goal"
    FACEOFFS_WON = "Faceoffs Won"
    HITS = "Hits"
    POINTS = "Points"
    GOALS = "Goals"
    ASSISTS = "Assists"
    BLOCKED_SHOTS = "Blocked Shots"
    GOALS_ALLOWED = "Goals Allowed"
    GOALIE_SAVES = "Goalie Saves"


class Position(str, Enum):
    LEFT_WING = "LW"
    RIGHT_WING = "RW"
    CENTER = "C"
    DEFENSE = "D"
    GOALTENDER = "G"

    @property
    def long_name(self) -> str:
        return {
            Position.LEFT_WING: "Left Wing",
            Position.RIGHT_WING: "Right Wing",
            Position.CENTER: "Center",
            Position.DEFENSE: "Defense",
            Position.GOALTENDER: "Goalie",
        }[self]


class PropSource(str, Enum):
    PRIZEPICKS = "PrizePicks"
    UNDERDOG = "Underdog"
    UNKNOWN = "Unknown"


class MatchTier(str, Enum):
    """Join tier that produced a defense rank."""

    EXACT = "exact"
    SUBSTRING = "substring"
    ALIAS_FORWARD = "alias_forward"
    ALIAS_REVERSE = "alias_reverse"
    NONE = "none"
