"""
Locale vocabularies for slot extraction.

Each locale is plain data: adding a language or a keyword is an edit to these
tables, not to the extraction code. Keyword families are ordered; the first
family that matches wins.
"""

from typing import Dict, Iterable, List

MONTHS_EN = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]

LOCALES: Dict[str, dict] = {
    "en": {
        "destination_prepositions": ["to", "visit", "visiting"],
        # also used for where people live or how they feel; trusted only for known places
        "weak_destination_prepositions": ["in"],
        "origin_prepositions": ["from"],
        "range_starts": ["from", "between"],
        "range_joiners": ["to", "until", "till", "and", "-"],
        "month_lead_ins": ["in", "during", "this", "next", "around", "early", "late", "mid"],
        "connectors": [
            "to", "for", "on", "in", "with", "and", "at", "next", "this",
            "around", "between", "during", "until", "via", "but", "so",
        ],
        "day_words": ["day", "days"],
        "week_words": ["week", "weeks"],
        "month_words": ["month", "months"],
        "people_words": ["people", "persons", "person", "travelers", "travellers", "adults", "guests", "of us"],
        "months": {m.lower(): m for m in MONTHS_EN},
        # common verbs that collide with month names; ignored when a month stands alone
        "ambiguous_months": ["may", "march"],
        "travelers": {
            "2 people (couple)": [
                "wife", "husband", "partner", "girlfriend", "boyfriend", "spouse",
                "fiance", "fiancee", "fiancé", "fiancée", "significant other",
                "honeymoon", "my love",
            ],
            "1 person (solo)": ["alone", "solo", "by myself", "on my own", "just me"],
            "family": ["family", "my kids", "my children"],
        },
        "purpose": {
            "culture": [
                "culture", "cultural", "museum", "museums", "history", "historical",
                "art", "architecture", "heritage",
            ],
            "gastronomy": [
                "food", "foodie", "gastronomy", "gastronomic", "restaurant",
                "restaurants", "cuisine", "culinary", "wine",
            ],
            "exploring": ["explore", "exploring", "exploration", "discover", "discovering", "sightseeing"],
            "adventure": ["adventure", "adventurous", "hiking", "hike", "trekking", "outdoor", "outdoors"],
        },
        "stopwords": [
            "I", "I'm", "Im", "We", "My", "Me", "The", "A", "An", "It", "This", "That",
            "Next", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday",
            "Sunday", "Christmas", "Easter", "Summer", "Winter", "Spring", "Autumn", "Fall",
        ],
    },
    "fr": {
        "destination_prepositions": ["vers", "visiter"],
        "weak_destination_prepositions": ["à", "en"],
        "origin_prepositions": ["depuis"],
        "range_starts": ["du", "entre"],
        "range_joiners": ["au", "jusqu'au", "et"],
        "month_lead_ins": ["en", "au mois de", "début", "fin", "mi"],
        "connectors": ["à", "pour", "avec", "vers", "et", "en", "du", "au", "pendant"],
        "day_words": ["jour", "jours"],
        "week_words": ["semaine", "semaines"],
        "month_words": ["mois"],
        "people_words": ["personnes", "personne", "voyageurs", "adultes"],
        "months": {
            "janvier": "January", "février": "February", "fevrier": "February",
            "mars": "March", "avril": "April", "mai": "May", "juin": "June",
            "juillet": "July", "août": "August", "aout": "August",
            "septembre": "September", "octobre": "October", "novembre": "November",
            "décembre": "December", "decembre": "December",
        },
        "ambiguous_months": [],
        "travelers": {
            "2 people (couple)": [
                "ma femme", "mon mari", "mon copain", "ma copine", "mon conjoint",
                "ma conjointe", "mon épouse", "mon époux", "en couple", "lune de miel",
            ],
            "1 person (solo)": ["seul", "seule", "tout seul", "toute seule"],
            "family": ["famille", "mes enfants"],
        },
        "purpose": {
            "culture": ["musée", "musées", "histoire", "patrimoine"],
            "gastronomy": ["gastronomie", "gastronomique", "nourriture"],
            "exploring": ["explorer", "découvrir", "découverte"],
            "adventure": ["aventure", "randonnée", "randonnées"],
        },
        "stopwords": ["Je", "Nous", "Le", "La", "Les", "Noël", "Pâques", "Été", "Hiver"],
    },
    "es": {
        "destination_prepositions": ["hacia", "visitar"],
        "weak_destination_prepositions": ["en"],
        "origin_prepositions": ["desde"],
        "range_starts": ["del", "desde", "entre"],
        "range_joiners": ["al", "hasta", "y"],
        "month_lead_ins": ["en", "durante", "a principios de", "a finales de"],
        "connectors": ["a", "para", "con", "y", "en", "hacia", "durante"],
        "day_words": ["día", "días", "dia", "dias"],
        "week_words": ["semana", "semanas"],
        "month_words": ["mes", "meses"],
        "people_words": ["personas", "persona", "viajeros", "adultos"],
        "months": {
            "enero": "January", "febrero": "February", "marzo": "March",
            "abril": "April", "mayo": "May", "junio": "June", "julio": "July",
            "agosto": "August", "septiembre": "September", "setiembre": "September",
            "octubre": "October", "noviembre": "November", "diciembre": "December",
        },
        "ambiguous_months": [],
        "travelers": {
            "2 people (couple)": [
                "mi esposa", "mi esposo", "mi mujer", "mi marido", "mi pareja",
                "mi novia", "mi novio", "luna de miel",
            ],
            "1 person (solo)": ["sola", "solo yo"],
            "family": ["familia", "mis hijos"],
        },
        "purpose": {
            "culture": ["cultura", "museo", "museos", "historia"],
            "gastronomy": ["gastronomía", "comida", "restaurantes"],
            "exploring": ["explorar", "descubrir"],
            "adventure": ["aventura", "senderismo"],
        },
        "stopwords": ["Yo", "Nosotros", "El", "La", "Los", "Las", "Navidad"],
    },
}

DEFAULT_LOCALES = ("en", "fr", "es")

# Alternate spellings -> canonical English name
CANONICAL_PLACES: Dict[str, str] = {
    "londres": "London",
    "roma": "Rome",
    "lisboa": "Lisbon",
    "lisbonne": "Lisbon",
    "münchen": "Munich",
    "munchen": "Munich",
    "venise": "Venice",
    "venezia": "Venice",
    "firenze": "Florence",
    "florencia": "Florence",
    "praga": "Prague",
    "viena": "Vienna",
    "vienne": "Vienna",
    "wien": "Vienna",
    "atenas": "Athens",
    "athènes": "Athens",
    "nueva york": "New York",
    "tokio": "Tokyo",
    "pékin": "Beijing",
    "copenhague": "Copenhagen",
    "bruxelles": "Brussels",
    "bruselas": "Brussels",
    "japon": "Japan",
    "japón": "Japan",
    "espagne": "Spain",
    "españa": "Spain",
    "italie": "Italy",
    "italia": "Italy",
    "allemagne": "Germany",
    "alemania": "Germany",
    "grèce": "Greece",
    "grecia": "Greece",
    "maroc": "Morocco",
    "marruecos": "Morocco",
    "égypte": "Egypt",
    "egipto": "Egypt",
    "mexique": "Mexico",
    "méxico": "Mexico",
    "thaïlande": "Thailand",
    "tailandia": "Thailand",
    "marrakesh": "Marrakech",
    "séville": "Seville",
    "sevilla": "Seville",
}

GAZETTEER: List[str] = [
    # cities
    "Paris", "London", "Rome", "Barcelona", "Madrid", "Lisbon", "Porto", "Amsterdam",
    "Berlin", "Munich", "Prague", "Vienna", "Budapest", "Venice", "Florence", "Milan",
    "Naples", "Athens", "Istanbul", "Dubrovnik", "Copenhagen", "Stockholm", "Oslo",
    "Brussels", "Dublin", "Edinburgh", "Lyon", "Marseille", "Seville",
    "Valencia", "Marrakech", "Cairo", "Dubai", "Tokyo", "Kyoto", "Osaka", "Seoul",
    "Beijing", "Shanghai", "Hong Kong", "Singapore", "Bangkok", "Bali", "Sydney",
    "Melbourne", "New York", "San Francisco", "Los Angeles", "Las Vegas", "Chicago",
    "Miami", "Toronto", "Montreal", "Vancouver", "Mexico City", "Cancun",
    "Rio de Janeiro", "Buenos Aires", "Lima", "Cape Town", "Nairobi", "Reykjavik",
    # countries
    "France", "Italy", "Spain", "Portugal", "Germany", "Greece", "Croatia", "Iceland",
    "Japan", "Thailand", "Vietnam", "Indonesia", "India", "Morocco", "Egypt",
    "Mexico", "Peru", "Brazil", "Argentina", "Canada", "Australia", "New Zealand",
]


def merged(key: str, locales: Iterable[str] = DEFAULT_LOCALES) -> List[str]:
    """Flatten a list-valued vocabulary entry across locales, keeping order."""
    out: List[str] = []
    for code in locales:
        for word in LOCALES[code].get(key, []):
            if word not in out:
                out.append(word)
    return out


def merged_months(locales: Iterable[str] = DEFAULT_LOCALES) -> Dict[str, str]:
    months: Dict[str, str] = {}
    for code in locales:
        months.update(LOCALES[code]["months"])
    return months


def merged_families(key: str, locales: Iterable[str] = DEFAULT_LOCALES) -> Dict[str, List[str]]:
    """
    Merge keyword families across locales. Family order follows the first
    locale, so "couple" is still checked before "solo" before "family".
    """
    families: Dict[str, List[str]] = {}
    for code in locales:
        for label, words in LOCALES[code].get(key, {}).items():
            families.setdefault(label, [])
            families[label].extend(w for w in words if w not in families[label])
    return families


def canonical_place(name: str) -> str:
    return CANONICAL_PLACES.get(name.strip().lower(), name.strip())
