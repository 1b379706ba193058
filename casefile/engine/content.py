"""
Who Is Daphne? - Story Content
===============================
Loads ``dialogues.json`` into frozen dataclasses, one bundle per screen.
Content is pure data: nothing in it is executed, and every script in it
is validated through ``casefile.engine.script`` when the file is read.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from casefile.core.constants import CONTENT_PATH
from casefile.engine.script import ContentError, Script, parse_script

logger = logging.getLogger(__name__)


# ── Evidence & witnesses ────────────────────────────────────────────
@dataclass(frozen=True)
class EvidenceItem:
    id: str
    label: str
    lead_text: str
    lead_text_after: str | None
    dialogue: Script
    icon: str | None = None


@dataclass(frozen=True)
class EvidenceContent:
    intro: Script
    items: tuple[EvidenceItem, ...]

    def find(self, evidence_id: str) -> EvidenceItem | None:
        return next((item for item in self.items if item.id == evidence_id), None)


@dataclass(frozen=True)
class Witness:
    id: str
    label: str
    pitch: str
    image: str | None
    music: bool
    wide: bool
    delay_image: bool
    leads: tuple[str, ...]
    dialogue: Script


@dataclass(frozen=True)
class WitnessContent:
    intro: Script
    witnesses: tuple[Witness, ...]

    def find(self, witness_id: str) -> Witness | None:
        return next((w for w in self.witnesses if w.id == witness_id), None)


# ── Identify ────────────────────────────────────────────────────────
@dataclass(frozen=True)
class IdentifyItem:
    id: str
    name: str
    trait: str
    dialogue: Script


@dataclass(frozen=True)
class WordCluster:
    words: tuple[str, ...]
    depression_stage: int
    double_click: str | None
    after_appear: Script


@dataclass(frozen=True)
class CrossOutResponse:
    dialogue: str
    recovery_stage: int = 0
    show_more_words: bool = False


@dataclass(frozen=True)
class AdditionalCluster:
    words: tuple[str, ...]
    cross_out_response: str
    recovery_stage: int = 0


@dataclass(frozen=True)
class FearContent:
    intro: Script
    clusters: tuple[WordCluster, ...]
    cross_out_responses: tuple[CrossOutResponse, ...]
    additional_clusters: tuple[AdditionalCluster, ...]
    conclusion: Script

    @property
    def all_words(self) -> list[str]:
        words = [w for c in self.clusters for w in c.words]
        words.extend(w for c in self.additional_clusters for w in c.words)
        return words


@dataclass(frozen=True)
class DreamItem:
    surface: str
    hidden: str
    response: str


@dataclass(frozen=True)
class DreamContent:
    items: tuple[DreamItem, ...]
    conclusion: Script


@dataclass(frozen=True)
class FinaleContent:
    prompt: str
    valid_answers: tuple[str, ...]
    wrong_answer_messages: tuple[str, ...]
    floating_words: tuple[str, ...]
    final_dialogue: Script
    end_messages: tuple[str, ...]


@dataclass(frozen=True)
class IdentifyContent:
    intro: Script
    after_evidence: Script
    items: tuple[IdentifyItem, ...]
    fears: FearContent
    dreams: DreamContent
    finale: FinaleContent

    def find(self, item_id: str) -> IdentifyItem | None:
        return next((item for item in self.items if item.id == item_id), None)


# ── Menu ────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class MenuContent:
    idle_lines: tuple[str, ...]
    coffee_reactions: tuple[str, ...]
    coffee_lines: frozenset[int]
    special_portraits: tuple[str, ...]


@dataclass(frozen=True)
class StoryContent:
    intro: Script
    leads: Script
    evidence: EvidenceContent
    witnesses: WitnessContent
    identify: IdentifyContent
    menu: MenuContent


# ── Loading helpers ─────────────────────────────────────────────────
def _section(raw: dict[str, Any], key: str, path: str) -> Any:
    if key not in raw:
        raise ContentError(path, f"missing '{key}'")
    return raw[key]


def _strings(raw: Any, path: str, allow_empty: bool = False) -> tuple[str, ...]:
    if not isinstance(raw, list) or not all(isinstance(s, str) for s in raw):
        raise ContentError(path, "expected a list of strings")
    if not raw and not allow_empty:
        raise ContentError(path, "list is empty")
    return tuple(raw)


def _evidence(raw: dict[str, Any], path: str) -> EvidenceContent:
    items = []
    for i, item in enumerate(_section(raw, "items", path)):
        item_path = f"{path}.items[{i}]"
        if not item.get("id"):
            raise ContentError(item_path, "evidence item needs an id")
        items.append(
            EvidenceItem(
                id=item["id"],
                label=item.get("label", item["id"]),
                lead_text=_section(item, "leadText", item_path),
                lead_text_after=item.get("leadTextAfter"),
                dialogue=parse_script(_section(item, "dialogue", item_path), f"{item_path}.dialogue"),
                icon=item.get("icon"),
            )
        )
    return EvidenceContent(
        intro=parse_script(_section(raw, "intro", path), f"{path}.intro"),
        items=tuple(items),
    )


def _witnesses(raw: dict[str, Any], path: str) -> WitnessContent:
    witnesses = []
    for i, item in enumerate(_section(raw, "witnesses", path)):
        item_path = f"{path}.witnesses[{i}]"
        if not item.get("id"):
            raise ContentError(item_path, "witness needs an id")
        witnesses.append(
            Witness(
                id=item["id"],
                label=item.get("name", item["id"].title()),
                pitch=item.get("pitch") or "normal",
                image=item.get("image"),
                music=bool(item.get("music", False)),
                wide=bool(item.get("wide", False)),
                delay_image=bool(item.get("delayImage", False)),
                leads=_strings(item.get("leads", []), f"{item_path}.leads", allow_empty=True),
                dialogue=parse_script(_section(item, "dialogue", item_path), f"{item_path}.dialogue"),
            )
        )
    return WitnessContent(
        intro=parse_script(_section(raw, "intro", path), f"{path}.intro"),
        witnesses=tuple(witnesses),
    )


def _fears(raw: dict[str, Any], path: str) -> FearContent:
    clusters = []
    for i, cluster in enumerate(_section(raw, "wordClusters", path)):
        c_path = f"{path}.wordClusters[{i}]"
        clusters.append(
            WordCluster(
                words=_strings(_section(cluster, "words", c_path), f"{c_path}.words"),
                depression_stage=int(cluster.get("depressionStage", 0)),
                double_click=cluster.get("doubleClick"),
                after_appear=parse_script(cluster.get("afterAppear", []), f"{c_path}.afterAppear"),
            )
        )
    responses = tuple(
        CrossOutResponse(
            dialogue=_section(r, "dialogue", f"{path}.crossOutResponses[{i}]"),
            recovery_stage=int(r.get("recoveryStage", 0)),
            show_more_words=bool(r.get("showMoreWords", False)),
        )
        for i, r in enumerate(raw.get("crossOutResponses", []))
    )
    additional = tuple(
        AdditionalCluster(
            words=_strings(_section(c, "words", f"{path}.additionalClusters[{i}]"),
                           f"{path}.additionalClusters[{i}].words"),
            cross_out_response=c.get("crossOutResponse", ""),
            recovery_stage=int(c.get("recoveryStage", 0)),
        )
        for i, c in enumerate(raw.get("additionalClusters", []))
    )
    return FearContent(
        intro=parse_script(_section(raw, "intro", path), f"{path}.intro"),
        clusters=tuple(clusters),
        cross_out_responses=responses,
        additional_clusters=additional,
        conclusion=parse_script(_section(raw, "conclusion", path), f"{path}.conclusion"),
    )


def _identify(raw: dict[str, Any], path: str) -> IdentifyContent:
    items = []
    for item_id, item in _section(raw, "evidenceItems", path).items():
        i_path = f"{path}.evidenceItems.{item_id}"
        items.append(
            IdentifyItem(
                id=item_id,
                name=_section(item, "name", i_path),
                trait=_section(item, "trait", i_path),
                dialogue=parse_script(_section(item, "dialogue", i_path), f"{i_path}.dialogue"),
            )
        )

    dreams_raw = _section(raw, "dreams", path)
    dreams = DreamContent(
        items=tuple(
            DreamItem(surface=d["surface"], hidden=d["hidden"], response=d["response"])
            for d in _section(dreams_raw, "items", f"{path}.dreams")
        ),
        conclusion=parse_script(_section(dreams_raw, "conclusion", f"{path}.dreams"),
                                f"{path}.dreams.conclusion"),
    )

    finale_raw = _section(raw, "finale", path)
    f_path = f"{path}.finale"
    finale = FinaleContent(
        prompt=_section(finale_raw, "prompt", f_path),
        valid_answers=_strings(_section(finale_raw, "validAnswers", f_path), f"{f_path}.validAnswers"),
        wrong_answer_messages=_strings(
            _section(finale_raw, "wrongAnswerMessages", f_path), f"{f_path}.wrongAnswerMessages"
        ),
        floating_words=_strings(finale_raw.get("floatingWords", []), f"{f_path}.floatingWords",
                                allow_empty=True),
        final_dialogue=parse_script(_section(finale_raw, "finalDialogue", f_path),
                                    f"{f_path}.finalDialogue"),
        end_messages=_strings(finale_raw.get("endMessages", []), f"{f_path}.endMessages",
                              allow_empty=True),
    )

    return IdentifyContent(
        intro=parse_script(_section(raw, "intro", path), f"{path}.intro"),
        after_evidence=parse_script(_section(raw, "afterEvidence", path), f"{path}.afterEvidence"),
        items=tuple(items),
        fears=_fears(_section(raw, "fears", path), f"{path}.fears"),
        dreams=dreams,
        finale=finale,
    )


def _menu(raw: dict[str, Any], path: str) -> MenuContent:
    return MenuContent(
        idle_lines=_strings(_section(raw, "idle", path), f"{path}.idle"),
        coffee_reactions=_strings(_section(raw, "coffeeReactions", path), f"{path}.coffeeReactions"),
        coffee_lines=frozenset(int(i) for i in raw.get("coffeeLines", [])),
        special_portraits=_strings(raw.get("specialPortraits", []), f"{path}.specialPortraits",
                                   allow_empty=True),
    )


def parse_content(raw: dict[str, Any]) -> StoryContent:
    """Build a ``StoryContent`` from already-decoded JSON data."""
    if not isinstance(raw, dict):
        raise ContentError("$", "content root must be an object")
    return StoryContent(
        intro=parse_script(_section(raw, "intro", "$"), "intro"),
        leads=parse_script(_section(raw, "leads", "$"), "leads"),
        evidence=_evidence(_section(raw, "physicalEvidence", "$"), "physicalEvidence"),
        witnesses=_witnesses(_section(raw, "witnessReports", "$"), "witnessReports"),
        identify=_identify(_section(raw, "identifySuspect", "$"), "identifySuspect"),
        menu=_menu(_section(raw, "menu", "$"), "menu"),
    )


def load_content(path: Path | str = CONTENT_PATH) -> StoryContent:
    path = Path(path)
    with path.open("r", encoding="utf-8") as handle:
        raw = json.load(handle)
    try:
        content = parse_content(raw)
    except ContentError as exc:
        logger.error("[Content] %s is malformed: %s", path, exc)
        raise
    logger.debug("[Content] Loaded %s", path)
    return content
