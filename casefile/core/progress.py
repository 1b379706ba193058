"""
Who Is Daphne? - Case Progress
===============================
Tracks what the cadet has collected across screens: the ordered list of
leads, which evidence items and witnesses are done, and whether the
leads briefing has been finished.  Together these gate the
"Identify Suspect" button on the menu.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class CaseProgress:
    """Mutable container for cross-screen completion state."""

    total_evidence: int = 0
    total_witnesses: int = 0

    # ── State ───────────────────────────────────────────────────────
    leads: list[str] = field(default_factory=list)
    leads_complete: bool = False
    pending_renames: dict[str, str] = field(default_factory=dict)

    # ── Completion sets (insertion ordered, never duplicated) ───────
    completed_evidence: list[str] = field(default_factory=list)
    completed_witnesses: list[str] = field(default_factory=list)

    # ── Leads ───────────────────────────────────────────────────────
    def has_lead(self, text: str) -> bool:
        return text in self.leads

    def add_lead(self, text: str) -> bool:
        """Append *text* unless it is already listed.  Returns whether it was added."""
        if self.has_lead(text):
            return False
        self.leads.append(text)
        return True

    def rename_lead(self, old: str, new: str) -> bool:
        """Replace *old* with *new* in place, keeping its display position."""
        try:
            index = self.leads.index(old)
        except ValueError:
            return False
        self.leads[index] = new
        return True

    def schedule_rename(self, old: str, new: str) -> None:
        self.pending_renames[old] = new

    def apply_pending_renames(self) -> list[tuple[int, str]]:
        """Apply scheduled renames; returns ``(index, new_text)`` for each change."""
        changed: list[tuple[int, str]] = []
        for old, new in list(self.pending_renames.items()):
            if self.rename_lead(old, new):
                changed.append((self.leads.index(new), new))
                del self.pending_renames[old]
        return changed

    # ── Evidence & witnesses ────────────────────────────────────────
    def mark_evidence_complete(self, evidence_id: str) -> bool:
        if evidence_id in self.completed_evidence:
            return False
        self.completed_evidence.append(evidence_id)
        return True

    def mark_witness_complete(self, witness_id: str) -> bool:
        if witness_id in self.completed_witnesses:
            return False
        self.completed_witnesses.append(witness_id)
        return True

    def is_evidence_complete(self, evidence_id: str) -> bool:
        return evidence_id in self.completed_evidence

    def is_witness_complete(self, witness_id: str) -> bool:
        return witness_id in self.completed_witnesses

    @property
    def all_evidence_complete(self) -> bool:
        return len(self.completed_evidence) >= self.total_evidence

    @property
    def all_witnesses_complete(self) -> bool:
        return len(self.completed_witnesses) >= self.total_witnesses

    # ── Gating ──────────────────────────────────────────────────────
    @property
    def can_identify(self) -> bool:
        return self.leads_complete and self.all_evidence_complete and self.all_witnesses_complete

    def reset(self) -> None:
        self.leads.clear()
        self.leads_complete = False
        self.pending_renames.clear()
        self.completed_evidence.clear()
        self.completed_witnesses.clear()
