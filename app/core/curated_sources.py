"""Curated fallback catalog of known regulatory sources.

Used when live web search is unavailable. Entries are keyed by catalog key
("USA", "EU", "USA-<State>") and category, and each entry carries its own
jurisdiction level. State tables hold state sources only; federal sources
are added from the country table when a run merges levels.
"""

from dataclasses import dataclass

from app.core.jurisdiction import US_CATALOG_KEY, state_catalog_key
from app.core.schemas_discovery import JurisdictionLevel, RegulatoryCategory
from app.core.url_utils import normalize_url

CATALOG_VERSION = "2024.1"

FEDERAL = JurisdictionLevel.FEDERAL
STATE = JurisdictionLevel.STATE

ENV = RegulatoryCategory.ENVIRONMENTAL
PRIVACY = RegulatoryCategory.DATA_PRIVACY
FIN = RegulatoryCategory.FINANCIAL
SAFETY = RegulatoryCategory.SAFETY_WORKFORCE
LEGAL = RegulatoryCategory.LEGAL_CONTRACTUAL


@dataclass(frozen=True)
class CuratedSource:
    url: str
    title: str
    level: JurisdictionLevel


CURATED_SOURCES: dict[str, dict[RegulatoryCategory, list[CuratedSource]]] = {
    "USA": {
        ENV: [
            CuratedSource("https://www.epa.gov/laws-regulations", "EPA Laws & Regulations", FEDERAL),
            CuratedSource(
                "https://www.epa.gov/regulatory-information-sector", "EPA Sector Regulations", FEDERAL
            ),
        ],
        PRIVACY: [
            CuratedSource(
                "https://www.ftc.gov/business-guidance/privacy-security", "FTC Privacy & Security", FEDERAL
            ),
            CuratedSource(
                "https://www.hhs.gov/hipaa/for-professionals/index.html", "HHS HIPAA Guide", FEDERAL
            ),
        ],
        FIN: [
            CuratedSource("https://www.sec.gov/rules", "SEC Rules", FEDERAL),
            CuratedSource("https://www.pcaobus.org/Standards", "PCAOB Auditing Standards", FEDERAL),
        ],
        SAFETY: [
            CuratedSource("https://www.osha.gov/laws-regs", "OSHA Laws & Regulations", FEDERAL),
            CuratedSource(
                "https://www.dol.gov/general/topic/safety-health", "DOL Workplace Safety & Health", FEDERAL
            ),
        ],
        LEGAL: [
            CuratedSource("https://www.law.cornell.edu/uscode", "US Code - Cornell Law", FEDERAL),
        ],
    },
    "USA-Texas": {
        ENV: [
            CuratedSource(
                "https://www.tceq.texas.gov/rules", "Texas Commission on Environmental Quality Rules", STATE
            ),
            CuratedSource("https://www.tceq.texas.gov/permitting/air", "TCEQ Air Quality Permits", STATE),
        ],
        PRIVACY: [
            CuratedSource(
                "https://capitol.texas.gov/BillLookup/History.aspx?LegSess=88R&Bill=HB4",
                "Texas Data Privacy Act",
                STATE,
            ),
        ],
        FIN: [
            CuratedSource("https://www.finance.texas.gov/", "Texas Dept of Banking", STATE),
        ],
        SAFETY: [
            CuratedSource("https://www.twc.texas.gov/", "Texas Workforce Commission", STATE),
        ],
        LEGAL: [
            CuratedSource("https://statutes.capitol.texas.gov/", "Texas Statutes", STATE),
        ],
    },
    "EU": {
        ENV: [
            CuratedSource(
                "https://environment.ec.europa.eu/law-and-governance_en", "EU Environmental Law", FEDERAL
            ),
            CuratedSource(
                "https://eur-lex.europa.eu/browse/summaries.html", "EUR-Lex Legislation Summaries", FEDERAL
            ),
        ],
        PRIVACY: [
            CuratedSource("https://gdpr.eu/", "GDPR.eu Guide", FEDERAL),
            CuratedSource("https://edpb.europa.eu/edpb_en", "European Data Protection Board", FEDERAL),
        ],
        FIN: [
            CuratedSource(
                "https://www.esma.europa.eu/rules-databases-library/rules-database",
                "ESMA Rules Database",
                FEDERAL,
            ),
            CuratedSource(
                "https://www.eba.europa.eu/regulation-and-policy", "EBA Regulation and Policy", FEDERAL
            ),
        ],
        SAFETY: [
            CuratedSource("https://osha.europa.eu/en/legislation", "EU-OSHA Legislation", FEDERAL),
            CuratedSource(
                "https://ec.europa.eu/social/main.jsp?catId=148", "EU Health and Safety at Work", FEDERAL
            ),
        ],
        LEGAL: [
            CuratedSource("https://eur-lex.europa.eu/homepage.html", "EUR-Lex", FEDERAL),
        ],
    },
}


def curated_sources_for(
    country_key: str | None,
    category: RegulatoryCategory,
    region: str | None = None,
) -> list[CuratedSource]:
    """
    List curated sources for a jurisdiction and category.

    State entries come first when a region has its own table, followed by
    country entries whose normalized URL is not already listed.

    Args:
        country_key: Catalog key from ``jurisdiction.catalog_key``
        category: Regulatory category
        region: Detected US state, if any

    Returns:
        Ordered, deduplicated entries (possibly empty)
    """
    entries: list[CuratedSource] = []
    if region and country_key == US_CATALOG_KEY:
        entries.extend(CURATED_SOURCES.get(state_catalog_key(region), {}).get(category, []))
    if country_key:
        entries.extend(CURATED_SOURCES.get(country_key, {}).get(category, []))

    seen: set[str] = set()
    unique: list[CuratedSource] = []
    for entry in entries:
        key = normalize_url(entry.url)
        if key not in seen:
            seen.add(key)
            unique.append(entry)
    return unique


def placeholder_text(source: CuratedSource) -> str:
    """Stand-in content for a curated source whose page could not be read."""
    return (
        f"Regulatory source: {source.title}\n"
        f"URL: {source.url}\n\n"
        "This source should be consulted directly for authoritative regulatory information."
    )
