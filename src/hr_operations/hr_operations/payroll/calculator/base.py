from __future__ import annotations

from abc import ABC, abstractmethod

from ..model import PayslipFigures, PayslipInputs


class PayslipCalculator(ABC):
    """Calculator interface (Strategy Pattern for payroll)."""

    @abstractmethod
    def calculate(self, inputs: PayslipInputs) -> PayslipFigures:
        raise NotImplementedError
