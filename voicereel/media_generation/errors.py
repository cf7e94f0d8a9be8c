"""Error taxonomy for the media generation pipeline"""


class VoiceReelError(Exception):
    """Base class for all pipeline errors"""


class InvalidInput(VoiceReelError):
    """Caller error; never retried"""


class TranscriptionServiceError(VoiceReelError):
    """Speech-to-text failed; fatal for the whole pipeline"""


class PromptGenerationError(VoiceReelError):
    """Prompt synthesis failed for one segment"""


class ImageGenerationError(VoiceReelError):
    """Image synthesis failed for one segment"""


class PipelineAbandoned(VoiceReelError):
    """The session was abandoned before reaching a terminal state"""


class InvalidTransition(VoiceReelError):
    """A pipeline stage change that the state machine does not allow"""

    def __init__(self, current, target):
        super().__init__(f"Cannot move pipeline from {current.value} to {target.value}")
        self.current = current
        self.target = target
