"""
Role profiles of the chat workflow.

One workflow serves clients and lawyers; what differs between them (default
suggestions, fallback topic pool, thread title templates) lives in a
`RoleProfile`. `CLIENT_PROFILE` and `LAWYER_PROFILE` are the two variants.
"""

import random
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from avocat_assist.api.models import OwnerRef, OwnerType, Role

CLIENT_DEFAULT_SUGGESTIONS = (
    "Quelles sont les étapes pour créer une entreprise en France ?",
    "Pouvez-vous m'expliquer les différents types de contrats de travail ?",
    "Quels sont mes droits en tant que locataire ?",
    "Comment protéger ma propriété intellectuelle ?",
    "Quelles sont les implications juridiques d'un divorce ?",
)

CLIENT_FALLBACK_POOL = (
    "Quelles sont les implications fiscales de cette situation ?",
    "Puis-je obtenir une aide juridictionnelle dans ce cas ?",
    "Quels documents dois-je préparer pour cette procédure ?",
    "Quels sont les délais légaux à respecter ?",
    "Y a-t-il des précédents juridiques similaires à ma situation ?",
    "Quelles sont les alternatives à une procédure judiciaire ?",
    "Comment puis-je contester cette décision ?",
    "Quels sont mes recours possibles ?",
    "Quelles sont les prochaines étapes à suivre ?",
    "Pouvez-vous me donner un exemple de document à préparer ?",
)

LAWYER_DEFAULT_SUGGESTIONS = (
    "Quelles sont les dernières jurisprudences sur le droit du travail ?",
    "Comment rédiger une clause de non-concurrence efficace ?",
    "Quels sont les points clés à vérifier dans un bail commercial ?",
    "Expliquez la procédure d'appel en matière civile.",
    "Quelles sont les obligations déontologiques d'un avocat ?",
)

LAWYER_PROJECT_SUGGESTIONS = (
    "Analyser les points forts et faibles de ce dossier.",
    "Quelles sont les prochaines étapes procédurales ?",
    "Rédiger un projet de conclusions basé sur les documents.",
    "Identifier les jurisprudences pertinentes pour ce cas.",
    "Quels arguments pourrions-nous opposer ?",
)

LAWYER_FALLBACK_POOL = (
    "Quelles sont les implications fiscales de cette situation ?",
    "Quels sont les délais de prescription applicables ?",
    "Quels documents sont nécessaires pour cette procédure ?",
    "Quels sont les arguments juridiques clés à développer ?",
    "Y a-t-il des précédents jurisprudentiels pertinents ?",
    "Quelles sont les stratégies de négociation possibles ?",
    "Comment contester cette pièce adverse ?",
    "Quels sont les recours possibles en appel ?",
    "Quelles sont les prochaines étapes procédurales ?",
    "Pouvez-vous me fournir un modèle de conclusion ?",
)


def sample_suggestions(pool, limit: int = 5, rng: Optional[random.Random] = None) -> List[str]:
    """
    Shuffle-and-take: at most `limit` distinct entries of `pool`.

    Parameters
    ----------
    pool : sequence of str
        Static topic pool.
    limit : int
        Maximum size of the result.
    rng : random.Random, optional
        Source of randomness (seeded in tests).
    """
    rng = rng or random
    pool = list(dict.fromkeys(pool))
    return rng.sample(pool, min(limit, len(pool)))


class RoleProfile(BaseModel):
    """
    Presentation of the shared chat workflow for one role.

    Attributes
    ----------
    role : Role
        `client` or `lawyer`.
    default_suggestions : tuple[str, ...]
        Suggestions shown on a thread without persisted ones.
    project_suggestions : tuple[str, ...]
        Defaults for project threads (falls back to `default_suggestions`).
    fallback_pool : tuple[str, ...]
        Pool sampled after an answer that came without suggestions.
    project_title_template : str
        Title of a created project thread; `{id}` and `{title}` available.
    legal_request_title_template : str
        Title of a created legal request thread; `{id}` available.
    standalone_title : str
        Title of a created standalone conversation.
    """
    model_config = ConfigDict(frozen=True)

    role: Role
    default_suggestions: Tuple[str, ...]
    project_suggestions: Tuple[str, ...] = ()
    fallback_pool: Tuple[str, ...]
    project_title_template: str
    legal_request_title_template: str = "Demande juridique #{id}"
    standalone_title: str = "Nouvelle conversation"

    def defaults_for(self, owner_type: OwnerType) -> List[str]:
        if owner_type == OwnerType.PROJECT and self.project_suggestions:
            return list(self.project_suggestions)
        return list(self.default_suggestions)

    def thread_title(self, owner: OwnerRef) -> str:
        if owner.owner_entity_type == OwnerType.PROJECT:
            return self.project_title_template.format(
                id=owner.owner_entity_id,
                title=owner.title or owner.owner_entity_id,
            )
        if owner.owner_entity_type == OwnerType.LEGAL_REQUEST:
            return self.legal_request_title_template.format(id=owner.owner_entity_id)
        return self.standalone_title


CLIENT_PROFILE = RoleProfile(
    role=Role.CLIENT,
    default_suggestions=CLIENT_DEFAULT_SUGGESTIONS,
    fallback_pool=CLIENT_FALLBACK_POOL,
    project_title_template="Dossier {title}",
)

LAWYER_PROFILE = RoleProfile(
    role=Role.LAWYER,
    default_suggestions=LAWYER_DEFAULT_SUGGESTIONS,
    project_suggestions=LAWYER_PROJECT_SUGGESTIONS,
    fallback_pool=LAWYER_FALLBACK_POOL,
    project_title_template="Conversation Dossier {id}",
)


def profile_for(role: Role) -> RoleProfile:
    """Chat profile of a role. Admin roles use the lawyer wording."""
    return CLIENT_PROFILE if role == Role.CLIENT else LAWYER_PROFILE
