"""
Ladon -- Model Automation

An Automation driven through a FiniteStateMachine model.

Two phases run before the inherited plan:
  build_model   (required) subclasses assign ``self.model``
  verify_model  (required) raises InvalidModelError unless the model is an FSM

Every inherited phase is gated on the Result still being successful, so a
model that fails to build or verify stops the automation there.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

from ladon.automator.automation import Automation
from ladon.automator.phase import Phase, result_succeeding
from ladon.errors import InvalidModelError
from ladon.modeler.fsm import FiniteStateMachine

if TYPE_CHECKING:
    from ladon.automator.log import Logger
    from ladon.automator.timing import Timer
    from ladon.config import Config


class ModelAutomation(Automation, abstract=True):
    BUILD_MODEL_PHASE: ClassVar[str] = "build_model"
    VERIFY_MODEL_PHASE: ClassVar[str] = "verify_model"

    def __init__(
        self,
        config: Config | None = None,
        timer: Timer | None = None,
        logger: Logger | None = None,
    ) -> None:
        super().__init__(config=config, timer=timer, logger=logger)
        self.model: FiniteStateMachine | None = None

    @classmethod
    def phases(cls) -> list[Phase]:
        model_phases = [
            Phase(cls.BUILD_MODEL_PHASE, required=True),
            Phase(cls.VERIFY_MODEL_PHASE, required=True),
        ]
        return model_phases + [phase.requiring(result_succeeding) for phase in super().phases()]

    def build_model(self) -> None:
        """Subclasses must assign a FiniteStateMachine to ``self.model``."""
        self.model = None

    def verify_model(self) -> None:
        if not isinstance(self.model, FiniteStateMachine):
            raise InvalidModelError(
                f"The model must be a FiniteStateMachine, got {type(self.model).__name__}"
            )
        self.logger.info(f"Model verified: {type(self.model).__name__}")
