"""
Tessa Backend — Plan Catalogue
================================

Static plan data: project quotas, prices and the marketing copy shown by
GET /api/plans, plus Spanish translations for `?locale=es`.

Quotas are looked up by plan for every plan, including PRO, so adding a tier
means adding one entry per table below.
"""

from typing import Dict, List

from tessa.models.user import PlanType
from tessa.schemas.subscription import PlanInfo

PLAN_QUOTAS: Dict[PlanType, int] = {
    PlanType.FREE: 3,
    PlanType.PRO: 10,
}

PLANS: Dict[PlanType, PlanInfo] = {
    PlanType.FREE: PlanInfo(
        id=PlanType.FREE,
        name="Free Plan",
        description="Perfect for getting started",
        price=0,
        currency="USD",
        projects_quota=PLAN_QUOTAS[PlanType.FREE],
        features=[
            "Up to 3 projects",
            "Basic support",
            "Community access",
        ],
    ),
    PlanType.PRO: PlanInfo(
        id=PlanType.PRO,
        name="Pro Plan",
        description="For professional developers",
        price=29.99,
        currency="USD",
        projects_quota=PLAN_QUOTAS[PlanType.PRO],
        features=[
            "Up to 10 projects",
            "Priority support",
            "Advanced analytics",
            "Custom domains",
        ],
    ),
}

PLAN_TRANSLATIONS: Dict[str, Dict[PlanType, Dict[str, object]]] = {
    "es": {
        PlanType.FREE: {
            "name": "Plan Gratuito",
            "description": "Perfecto para comenzar",
            "features": [
                "Hasta 3 proyectos",
                "Soporte básico",
                "Acceso a la comunidad",
            ],
        },
        PlanType.PRO: {
            "name": "Plan Pro",
            "description": "Para desarrolladores profesionales",
            "features": [
                "Hasta 10 proyectos",
                "Soporte prioritario",
                "Analíticas avanzadas",
                "Dominios personalizados",
            ],
        },
    },
}


def get_plans(locale: str = "en") -> List[PlanInfo]:
    """
    Plan catalogue in display order.

    Unknown locales fall back to English; only name, description and
    features are translated.
    """
    translations = PLAN_TRANSLATIONS.get(locale.lower(), {})
    return [
        plan.model_copy(update=translations.get(plan_id, {}))
        for plan_id, plan in PLANS.items()
    ]


def project_quota(plan: PlanType) -> int:
    return PLAN_QUOTAS[plan]
