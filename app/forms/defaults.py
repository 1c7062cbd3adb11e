"""
app/forms/defaults.py — Canonical form configuration.

DEFAULT_FORM_CONFIG is the code-defined baseline. It is served when a
deployment has no stored configuration, and it is the reference the
reconciler merges stored configurations against.
"""

from app.forms.models import FormConfig


_DEFAULT_FORM_CONFIG_DATA = {
    "questions": [
        {
            "id": "nome",
            "order": 1,
            "title": "What is your full name?",
            "type": "text",
            "required": True,
            "placeholder": "Enter your full name",
        },
        {
            "id": "email",
            "order": 2,
            "title": "What is your email?",
            "type": "email",
            "required": True,
            "placeholder": "example@email.com",
        },
        {
            "id": "telefone",
            "order": 3,
            "title": "What is your mobile/WhatsApp number?",
            "type": "tel",
            "required": True,
            "placeholder": "(555) 123-4567",
        },
        {
            "id": "localizacao",
            "order": 4,
            "title": "Where are you today?",
            "type": "select",
            "required": True,
            "options": [
                {"value": "I already live in the US", "label": "I already live in the US", "points": 10},
                {"value": "I'm in Brazil but have a business in the US", "label": "I'm in Brazil but have a business in the US", "points": 8},
                {"value": "I'm moving to the US soon", "label": "I'm moving to the US soon", "points": 7},
                {"value": "Another country", "label": "Another country", "points": 5},
            ],
            "conditionalField": {
                "showWhen": "I already live in the US",
                "id": "cidadeEstado",
                "title": "Which city/state?",
                "placeholder": "e.g. Orlando, FL",
            },
        },
        {
            "id": "tipoNegocio",
            "order": 5,
            "title": "What type of business do you have?",
            "type": "select",
            "required": True,
            "options": [
                {"value": "Cleaning Services", "label": "Cleaning Services", "points": 10},
                {"value": "Landscaping", "label": "Landscaping", "points": 10},
                {"value": "Construction/Remodeling", "label": "Construction/Remodeling", "points": 10},
                {"value": "Painting", "label": "Painting", "points": 10},
                {"value": "Handyman", "label": "Handyman", "points": 10},
                {"value": "Other", "label": "Other (please specify)", "points": 5},
            ],
            "conditionalField": {
                "showWhen": "Other",
                "id": "tipoNegocioOutro",
                "title": "Describe your type of business",
                "placeholder": "e.g. Consulting, Education, Technology",
            },
        },
        {
            "id": "tempoNegocio",
            "order": 6,
            "title": "How long have you had this business?",
            "type": "select",
            "required": True,
            "options": [
                {"value": "Less than 6 months", "label": "Less than 6 months", "points": 3},
                {"value": "6 months to 1 year", "label": "6 months to 1 year", "points": 7},
                {"value": "1 to 3 years", "label": "1 to 3 years", "points": 10},
                {"value": "More than 3 years", "label": "More than 3 years", "points": 8},
            ],
        },
        {
            "id": "situacaoMarketing",
            "order": 7,
            "title": "How do you get new customers today?",
            "type": "select",
            "required": True,
            "options": [
                {"value": "I rely only on referrals", "label": "I rely only on referrals", "points": 8},
                {"value": "I tried ads on my own without much success", "label": "I tried ads on my own without much success", "points": 10},
                {"value": "I hired someone/an agency and it didn't work", "label": "I hired someone/an agency and it didn't work", "points": 10},
                {"value": "I have some results but want to scale", "label": "I have some results but want to scale", "points": 9},
                {"value": "I haven't started any marketing strategy yet", "label": "I haven't started any marketing strategy yet", "points": 5},
            ],
        },
        {
            "id": "orcamentoAnuncios",
            "order": 8,
            "title": (
                "Getting customers consistently requires investing in marketing "
                "(ads and/or structure). How does that fit your situation today?"
            ),
            "type": "select",
            "required": True,
            "options": [
                {"value": "Yes, I can invest in marketing to speed up growth", "label": "Yes, I can invest in marketing to speed up growth", "points": 10},
                {"value": "I can start small and increase with results", "label": "I can start small and increase with results", "points": 8},
                {"value": "I can't invest in that right now", "label": "I can't invest in that right now", "points": 3},
            ],
        },
        {
            "id": "principalDesafio",
            "order": 9,
            "title": "What is the biggest obstacle to growing your business today?",
            "type": "select",
            "required": True,
            "options": [
                {"value": "I don't have enough customers", "label": "I don't have enough customers", "points": 8},
                {"value": "I spend on marketing but see no return", "label": "I spend on marketing but see no return", "points": 10},
                {"value": "I depend on referrals and can't control my lead flow", "label": "I depend on referrals and can't control my lead flow", "points": 9},
                {"value": "I don't know where to start with digital marketing", "label": "I don't know where to start with digital marketing", "points": 7},
                {"value": "I have customers but can't charge what my service is worth", "label": "I have customers but can't charge what my service is worth", "points": 8},
            ],
        },
        {
            "id": "expectativaTempo",
            "order": 10,
            "title": (
                "Our clients usually see first leads in 2-4 weeks and consistent "
                "results in 60-90 days. Does that work for you?"
            ),
            "type": "select",
            "required": True,
            "options": [
                {"value": "Yes, I understand solid results take time", "label": "Yes, I understand solid results take time", "points": 10},
                {"value": "I need something faster", "label": "I need something faster", "points": 5},
                {"value": "I'm not sure yet", "label": "I'm not sure yet", "points": 3},
            ],
        },
    ],
    "maxScore": 70,
    "thresholds": {"hot": 70, "warm": 50, "cold": 30},
}

DEFAULT_FORM_CONFIG = FormConfig.model_validate(_DEFAULT_FORM_CONFIG_DATA)


def default_form_config() -> FormConfig:
    """Return a fresh copy of the canonical configuration, safe to modify."""
    return DEFAULT_FORM_CONFIG.model_copy(deep=True)


# Lead fields that have their own column in form_leads; other answers are
# stored as custom answers only.
KNOWN_FIELD_IDS = [
    "nome",
    "email",
    "telefone",
    "cidadeEstado",
    "tipoNegocio",
    "tipoNegocioOutro",
    "tempoNegocio",
    "situacaoMarketing",
    "orcamentoAnuncios",
    "principalDesafio",
    "expectativaTempo",
]

# Fixed score keys for question ids that predate generated keys. Persisted
# score columns depend on these names, so never rename an entry.
SCORE_FIELD_MAPPING = {
    "tipoNegocio": "scoreTipoNegocio",
    "tempoNegocio": "scoreTempoNegocio",
    "experienciaMarketing": "scoreExperiencia",
    "orcamentoAnuncios": "scoreOrcamento",
    "principalDesafio": "scoreDesafio",
    "disponibilidade": "scoreDisponibilidade",
    "expectativaResultado": "scoreExpectativa",
}
