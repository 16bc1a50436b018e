"""Manual QA confirmations; purely observational."""

from __future__ import annotations

from rankrent.schemas.build import QaChecklistItem

QA_CHECKLIST: tuple[QaChecklistItem, ...] = (
    QaChecklistItem(id="inputs-validated", label="Inputs validated", description="Brand name, city, address, phone, tier, and radius are correct"),
    QaChecklistItem(id="areas-confirmed", label="Areas confirmed", description="All location areas have been reviewed and saved"),
    QaChecklistItem(id="content-generated", label="Content generated", description="AI content has been generated and reviewed for accuracy"),
    QaChecklistItem(id="images-generated", label="Images generated externally", description="All image prompts have been used to generate images"),
    QaChecklistItem(id="variance-passed", label="Variance check passed", description="Content similarity is within acceptable thresholds"),
    QaChecklistItem(id="prompts-pasted", label="Deployment prompts pasted", description="All three deployment prompts (A, B, C) have been executed"),
    QaChecklistItem(id="sitemap-verified", label="Sitemap verified", description="sitemap.xml is accessible and contains all pages"),
    QaChecklistItem(id="schema-validated", label="Schema validated", description="JSON-LD schema passes Google Rich Results Test"),
    QaChecklistItem(id="site-deployed", label="Site deployed", description="Site is live and all pages are accessible"),
)
QA_ITEM_IDS = frozenset(item.id for item in QA_CHECKLIST)


def toggle_qa_check(checked: frozenset[str], item_id: str) -> frozenset[str]:
    """Flip one item; ids outside the checklist are ignored."""
    if item_id not in QA_ITEM_IDS:
        return checked
    if item_id in checked:
        return checked - {item_id}
    return checked | {item_id}


def qa_progress(checked: frozenset[str]) -> tuple[int, int]:
    return len(checked & QA_ITEM_IDS), len(QA_CHECKLIST)
