"""
Centralized audit logging for solver decisions, degenerate branches, and conservation checks.
"""
import logging
from datetime import datetime
from typing import List, Dict, Any, Optional
from dataclasses import dataclass, field
from enum import Enum


class AuditSeverity(Enum):
    """Enumeration for audit log severity levels."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


@dataclass
class AuditEvent:
    """Represents a single audit event."""
    timestamp: datetime
    solve_index: int
    component: str
    message: str
    severity: AuditSeverity
    metadata: Dict[str, Any] = field(default_factory=dict)


class SolverAuditLog:
    """
    Collects what the flux solver decided on each solve: the input it was given,
    which branch points fell back to an even split, and whether flux was conserved
    across branches.
    """

    def __init__(self):
        self.events: List[AuditEvent] = []
        self.logger = logging.getLogger(__name__)
        self.solve_count = 0

    def next_solve(self) -> int:
        """Advance the solve counter and return the new solve index."""
        self.solve_count += 1
        return self.solve_count

    def log_event(
        self,
        solve_index: int,
        component: str,
        message: str,
        severity: AuditSeverity = AuditSeverity.INFO,
        metadata: Optional[Dict[str, Any]] = None
    ) -> None:
        """
        Record an audit event and mirror it to standard logging.

        Args:
            solve_index: Index of the solve that produced the event
            component: Component that generated the event (e.g., 'Flux Solver')
            message: Description of the event
            severity: Severity level of the event
            metadata: Optional additional data associated with the event
        """
        event = AuditEvent(
            timestamp=datetime.now(),
            solve_index=solve_index,
            component=component,
            message=message,
            severity=severity,
            metadata=metadata or {}
        )
        self.events.append(event)

        log_method = getattr(self.logger, severity.value)
        log_method(f"[Solve {solve_index}] {component}: {message}")

    def log_solve(
        self,
        solve_index: int,
        input_flux: float,
        terminal_flux: Dict[str, float],
        degenerate_nodes: List[str]
    ) -> None:
        """Log a completed solve with the flux that reached each terminal."""
        summary = ", ".join(f"{node}={flux:.4f}" for node, flux in terminal_flux.items())
        message = f"input={input_flux:.4f}, terminals: {summary}"
        severity = AuditSeverity.WARNING if degenerate_nodes else AuditSeverity.DEBUG
        self.log_event(
            solve_index=solve_index,
            component="Flux Solver",
            message=message,
            severity=severity,
            metadata={
                "input_flux": input_flux,
                "terminal_flux": dict(terminal_flux),
                "degenerate_nodes": list(degenerate_nodes)
            }
        )

    def log_degenerate_branch(
        self,
        solve_index: int,
        node: str,
        genes: List[str],
        incoming_flux: float
    ) -> None:
        """Log a branch point whose exits all have zero accessibility."""
        message = (
            f"Degenerate branch at '{node}': all exits ({', '.join(genes)}) closed, "
            f"splitting {incoming_flux:.4f} evenly"
        )
        self.log_event(
            solve_index=solve_index,
            component="Branch Splitter",
            message=message,
            severity=AuditSeverity.WARNING,
            metadata={
                "node": node,
                "genes": list(genes),
                "incoming_flux": incoming_flux
            }
        )

    def log_conservation_violation(
        self,
        solve_index: int,
        node: str,
        incoming_flux: float,
        outgoing_flux: float
    ) -> None:
        """Log a branch point whose outgoing flux does not match its incoming flux."""
        message = f"Conservation violation at '{node}': in={incoming_flux}, out={outgoing_flux}"
        self.log_event(
            solve_index=solve_index,
            component="Conservation Check",
            message=message,
            severity=AuditSeverity.ERROR,
            metadata={
                "node": node,
                "incoming_flux": incoming_flux,
                "outgoing_flux": outgoing_flux,
                "violation_amount": abs(incoming_flux - outgoing_flux)
            }
        )

    def get_events_by_severity(self, severity: AuditSeverity) -> List[AuditEvent]:
        """Get all events of a specific severity level."""
        return [event for event in self.events if event.severity == severity]

    def get_events_by_component(self, component: str) -> List[AuditEvent]:
        """Get all events from a specific component."""
        return [event for event in self.events if event.component == component]

    def get_summary_stats(self) -> Dict[str, int]:
        """Get summary statistics of audit events."""
        stats = {
            "total_events": len(self.events),
            "total_solves": self.solve_count,
            "debug_count": 0,
            "info_count": 0,
            "warning_count": 0,
            "error_count": 0,
            "critical_count": 0
        }

        for event in self.events:
            stats[f"{event.severity.value}_count"] += 1

        return stats

    def clear(self) -> None:
        """Clear all audit events and reset the solve counter."""
        self.events.clear()
        self.solve_count = 0
