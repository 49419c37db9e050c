# apps/contacts/url_patterns.py

"""
Page-type keyword families per language, matched against URL path
segments. Families are checked in order; the first family with a matching
keyword names the page.
"""

from urllib.parse import unquote, urlparse

from apps.common.enums import ContactSource

PAGE_FAMILIES: list[tuple[str, dict[str, list[str]]]] = [
    ("contact", {
        "en": ["contact", "contact-us", "contactus", "get-in-touch", "reach-us", "contact-form", "contacts"],
        "nl": ["contacteer-ons", "contacteer", "neem-contact-op", "contact-opnemen", "contactformulier",
               "bereik-ons"],
        "de": ["kontakt", "kontaktieren", "kontaktformular", "kontakt-aufnehmen"],
        "fr": ["contactez-nous", "nous-contacter", "formulaire-contact", "contactez"],
        "es": ["contacto", "contactanos", "contacta-con-nosotros", "contactar"],
        "it": ["contatto", "contattaci", "contatta", "contatti"],
    }),
    ("team", {
        "en": ["team", "our-team", "the-team", "meet-the-team", "staff", "people", "leadership"],
        "nl": ["ons-team", "het-team", "medewerkers", "personeel", "mensen", "staf"],
        "de": ["unser-team", "mitarbeiter", "personal", "fuhrung", "leitung"],
        "fr": ["equipe", "notre-equipe", "collaborateurs", "direction"],
        "es": ["equipo", "nuestro-equipo", "empleados", "liderazgo"],
        "it": ["squadra", "il-nostro-team", "personale", "collaboratori", "dirigenza"],
    }),
    ("about", {
        "en": ["about", "about-us", "aboutus", "about-me", "who-we-are", "our-story", "company"],
        "nl": ["over", "over-ons", "overons", "wie-zijn-wij", "wie-we-zijn", "ons-verhaal", "bedrijf"],
        "de": ["uber", "uber-uns", "ueber-uns", "unsere-geschichte", "firma", "unternehmen"],
        "fr": ["a-propos", "apropos", "qui-sommes-nous", "notre-histoire", "entreprise", "societe"],
        "es": ["acerca", "acerca-de", "sobre-nosotros", "quienes-somos", "nuestra-historia", "empresa"],
        "it": ["chi-siamo", "su-di-noi", "la-nostra-storia", "azienda", "societa"],
    }),
    ("services", {
        "en": ["services", "our-services", "what-we-do", "solutions", "products"],
        "nl": ["diensten", "onze-diensten", "wat-wij-doen", "oplossingen", "producten"],
        "de": ["dienstleistungen", "leistungen", "losungen", "produkte", "angebot"],
        "fr": ["nos-services", "prestations", "produits", "offres"],
        "es": ["servicios", "nuestros-servicios", "soluciones", "productos"],
        "it": ["servizi", "i-nostri-servizi", "soluzioni", "prodotti"],
    }),
    ("careers", {
        "en": ["careers", "jobs", "vacancies", "work-with-us", "join-us"],
        "nl": ["vacatures", "werken-bij", "carriere"],
        "de": ["karriere", "jobs", "stellenangebote"],
        "fr": ["carrieres", "emplois", "recrutement"],
        "es": ["empleo", "trabaja-con-nosotros", "carreras"],
        "it": ["lavora-con-noi", "carriere", "offerte-di-lavoro"],
    }),
    ("blog", {
        "en": ["blog", "news", "articles", "insights"],
        "nl": ["nieuws", "artikelen"],
        "de": ["neuigkeiten", "aktuelles", "artikel"],
        "fr": ["actualites", "articles"],
        "es": ["noticias", "articulos"],
        "it": ["notizie", "articoli"],
    }),
    ("faq", {
        "en": ["faq", "faqs", "help", "support"],
        "nl": ["veelgestelde-vragen", "vragen", "hulp"],
        "de": ["haufige-fragen", "hilfe"],
        "fr": ["questions-frequentes", "aide"],
        "es": ["preguntas-frecuentes", "ayuda"],
        "it": ["domande-frequenti", "aiuto"],
    }),
    ("privacy", {
        "en": ["privacy", "privacy-policy", "cookie-policy", "gdpr"],
        "nl": ["privacybeleid", "privacyverklaring"],
        "de": ["datenschutz", "datenschutzerklarung", "impressum"],
        "fr": ["confidentialite", "politique-de-confidentialite", "mentions-legales"],
        "es": ["privacidad", "politica-de-privacidad", "aviso-legal"],
        "it": ["privacy-policy", "informativa-privacy"],
    }),
    ("terms", {
        "en": ["terms", "terms-of-service", "terms-and-conditions", "legal"],
        "nl": ["algemene-voorwaarden", "voorwaarden"],
        "de": ["agb", "nutzungsbedingungen"],
        "fr": ["conditions-generales", "cgv", "cgu"],
        "es": ["terminos", "terminos-y-condiciones"],
        "it": ["termini", "termini-e-condizioni"],
    }),
]

PAGE_SOURCES = {
    "contact": ContactSource.CONTACT_PAGE,
    "team": ContactSource.TEAM_PAGE,
    "about": ContactSource.ABOUT_PAGE,
}


def _segments(url: str) -> list[str]:
    path = unquote(urlparse(url).path).lower()
    segments = []
    for segment in path.split("/"):
        segment = segment.rsplit(".", 1)[0] if "." in segment else segment
        if segment:
            segments.append(segment)
    return segments


def page_type(url: str) -> str | None:
    """Family name of the page at ``url`` ('contact', 'blog', ...) or None."""
    segments = _segments(url)
    if not segments:
        return None
    for family, languages in PAGE_FAMILIES:
        keywords = {keyword for words in languages.values() for keyword in words}
        if any(segment in keywords for segment in segments):
            return family
    return None


def page_source(url: str) -> str | None:
    """Contact source tag for pages that name one, else None."""
    return PAGE_SOURCES.get(page_type(url))
