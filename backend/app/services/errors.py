class JobNotFoundError(Exception):
    """Job does not exist or belongs to another user."""


class AnalysisNotReadyError(Exception):
    """Proposal requested before the analysis pipeline completed."""


class ProposalNotReadyError(Exception):
    """Critique requested before a proposal was generated."""


class InvalidStatusTransitionError(Exception):
    """Status write that the job state machine does not allow."""


class ResumeNotFoundError(Exception):
    """Resume chunk does not exist or the caller may not change it."""
