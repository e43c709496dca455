"""A PDP-1 emulator complete enough to run Spacewar!."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, Protocol, Union

__all__ = [
    "Trapper",
    "MachineError",
    "UnknownInstrError",
    "HaltError",
    "LoopError",
    "Machine",
    "norm",
]

MASK = 0o777777
SIGN = 0o400000
MEMSIZE = 0o10000
_U32 = 0xFFFFFFFF

_AND = 0o01
_IOR = 0o02
_XOR = 0o03
_XCT = 0o04
_CALJDA = 0o07
_LAC = 0o10
_LIO = 0o11
_DAC = 0o12
_DAP = 0o13
_DIO = 0o15
_DZM = 0o16
_ADD = 0o20
_SUB = 0o21
_IDX = 0o22
_ISP = 0o23
_SAD = 0o24
_SAS = 0o25
_MUS = 0o26
_DIS = 0o27
_JMP = 0o30
_JSP = 0o31
_SKP = 0o32
_SFT = 0o33
_LAW = 0o34
_IOT = 0o35
_OPR = 0o37

_LOAD_LINE = re.compile(r"[ +]([0-7]+)\t([0-7]*)")


class Trapper(Protocol):
    """Receives the PDP-1 IOT instruction."""

    def trap(self, y: int) -> None: ...


class MachineError(Exception):
    """The machine cannot continue."""


class UnknownInstrError(MachineError):
    def __init__(self, inst: int, pc: int) -> None:
        self.inst = inst
        self.pc = pc
        super().__init__(f"unknown instruction {inst:06o} at {pc:06o}")


class HaltError(MachineError):
    def __init__(self, pc: int) -> None:
        self.pc = pc
        super().__init__(f"executed HLT instruction at {pc:06o}")


class LoopError(MachineError):
    def __init__(self, pc: int) -> None:
        self.pc = pc
        super().__init__(f"indirect load looping at {pc:06o}")


def norm(i: int) -> int:
    """Normalise to an 18-bit ones-complement word, folding -0 into 0."""
    i = (i + (i >> 18)) & _U32
    i &= MASK
    return 0 if i == MASK else i


@dataclass
class Machine:
    """The register and memory state of a PDP-1."""

    ac: int = 0
    io: int = 0
    pc: int = 0
    ov: int = 0
    mem: list[int] = field(default_factory=lambda: [0] * MEMSIZE)
    flag: list[bool] = field(default_factory=lambda: [False] * 7)
    sense: list[bool] = field(default_factory=lambda: [False] * 7)
    halt: bool = False

    def step(self, trapper: Trapper) -> None:
        """Execute one instruction; raise MachineError if it cannot."""
        inst = self.mem[self.pc]
        self.pc = (self.pc + 1) & _U32
        self._run(inst, trapper)

    def _run(self, inst: int, t: Trapper) -> None:
        ib = (inst >> 12) & 1
        y = inst & 0o7777
        op = inst >> 13
        mem = self.mem

        if op < _SKP and op != _CALJDA:
            n = 0
            while ib:
                if n > 0o7777:
                    raise LoopError(self.pc - 1)
                ib = (mem[y] >> 12) & 1
                y = mem[y] & 0o7777
                n += 1

        if op == _AND:
            self.ac &= mem[y]
        elif op == _IOR:
            self.ac |= mem[y]
        elif op == _XOR:
            self.ac ^= mem[y]
        elif op == _XCT:
            # Errors from the executed instruction are deliberately dropped.
            try:
                self._run(mem[y], t)
            except MachineError:
                pass
        elif op == _CALJDA:
            a = y if ib else 64
            mem[a] = self.ac
            self.ac = ((self.ov << 17) + self.pc) & _U32
            self.pc = a + 1
        elif op == _LAC:
            self.ac = mem[y]
        elif op == _LIO:
            self.io = mem[y]
        elif op == _DAC:
            mem[y] = self.ac
        elif op == _DAP:
            mem[y] = (mem[y] & 0o770000) | (self.ac & 0o7777)
        elif op == _DIO:
            mem[y] = self.io
        elif op == _DZM:
            mem[y] = 0
        elif op == _ADD:
            self.ac = (self.ac + mem[y]) & _U32
            self.ov = self.ac >> 18
            self.ac = norm(self.ac)
        elif op == _SUB:
            diff_signs = ((self.ac ^ mem[y]) >> 17) == 1
            self.ac = norm((self.ac + (mem[y] ^ MASK)) & _U32)
            if diff_signs and mem[y] >> 17 == self.ac >> 17:
                self.ov = 1
        elif op in (_IDX, _ISP):
            self.ac = norm((mem[y] + 1) & _U32)
            mem[y] = self.ac
            if op == _ISP and not self.ac & SIGN:
                self.pc += 1
        elif op == _SAD:
            if self.ac != mem[y]:
                self.pc += 1
        elif op == _SAS:
            if self.ac == mem[y]:
                self.pc += 1
        elif op == _MUS:
            if self.io & 1:
                self.ac = norm((self.ac + mem[y]) & _U32)
            self.io = ((self.io >> 1) | (self.ac << 17)) & MASK
            self.ac >>= 1
        elif op == _DIS:
            self.ac, self.io = (
                ((self.ac << 1) | (self.io >> 17)) & MASK,
                (((self.io << 1) | (self.ac >> 17)) & MASK) ^ 1,
            )
            if self.io & 1:
                self.ac = self.ac + (mem[y] ^ MASK)
            else:
                self.ac = self.ac + 1 + mem[y]
            self.ac = norm(self.ac & _U32)
        elif op == _JMP:
            self.pc = y
        elif op == _JSP:
            self.ac = ((self.ov << 17) + self.pc) & _U32
            self.pc = y
        elif op == _SKP:
            self._skip(y, ib)
        elif op == _SFT:
            count = inst & 0o777
            while count:
                if count & 1:
                    self._shift(inst)
                count >>= 1
        elif op == _LAW:
            self.ac = y ^ MASK if ib else y
        elif op == _IOT:
            t.trap(y)
        elif op == _OPR:
            self._operate(y)
        else:
            raise UnknownInstrError(inst, self.pc - 1)

    def _skip(self, y: int, ib: int) -> None:
        cond = (
            (y & 0o100 and self.ac == 0)
            or (y & 0o200 and self.ac >> 17 == 0)
            or (y & 0o400 and self.ac >> 17 == 1)
            or (y & 0o1000 and self.ov == 0)
            or (y & 0o2000 and self.io >> 17 == 0)
            or (y & 7 and not self.flag[y & 7])
            or (y & 0o70 and not self.sense[(y & 0o70) >> 3])
            or (y & 0o70 == 0o10)
        )
        if (ib == 0) == bool(cond):
            self.pc += 1
        if y & 0o1000:
            self.ov = 0

    def _shift(self, inst: int) -> None:
        kind = (inst >> 9) & 0o17
        ac, io = self.ac, self.io
        if kind == 0o01:
            self.ac = ((ac << 1) | (ac >> 17)) & MASK
        elif kind == 0o02:
            self.io = ((io << 1) | (io >> 17)) & MASK
        elif kind == 0o03:
            w = (ac << 18) | io
            w = (w << 1) | (w >> 35)
            self.ac = (w >> 18) & MASK
            self.io = w & MASK
        elif kind == 0o05:
            self.ac = (((ac << 1) | (ac >> 17)) & MASK & ~SIGN) | (ac & SIGN)
        elif kind == 0o06:
            self.io = (((io << 1) | (io >> 17)) & MASK & ~SIGN) | (io & SIGN)
        elif kind == 0o07:
            w = (ac << 18) | io
            w = (w << 1) | (w >> 35)
            self.ac = ((w >> 18) & MASK & ~SIGN) | (ac & SIGN)
            self.io = (w & MASK & ~SIGN) | (self.ac & SIGN)
        elif kind == 0o11:
            self.ac = ((ac >> 1) | (ac << 17)) & MASK
        elif kind == 0o12:
            self.io = ((io >> 1) | (io << 17)) & MASK
        elif kind == 0o13:
            w = (ac << 18) | io
            w = (w >> 1) | (w << 35)
            self.ac = (w >> 18) & MASK
            self.io = w & MASK
        elif kind == 0o15:
            self.ac = (ac >> 1) | (ac & SIGN)
        elif kind == 0o16:
            self.io = (io >> 1) | (io & SIGN)
        elif kind == 0o17:
            w = ((ac << 18) | io) >> 1
            self.ac = ((w >> 18) & _U32) | (ac & SIGN)
            self.io = w & MASK
        else:
            raise UnknownInstrError(inst, self.pc - 1)

    def _operate(self, y: int) -> None:
        if y & 0o200:
            self.ac = 0
        if y & 0o4000:
            self.io = 0
        if y & 0o1000:
            self.ac ^= MASK
        if y & 0o400:
            self.pc -= 1
            raise HaltError(self.pc)
        i, f = y & 7, bool(y & 0o10)
        if i == 7:
            for k in range(2, 7):
                self.flag[k] = f
        elif i >= 2:
            self.flag[i] = f

    def load(self, stream: Iterable[Union[str, bytes]]) -> None:
        """Load memory from lines of octal "address<TAB>value" pairs.

        Only lines starting with a space or '+' are used; a final line
        without a newline is ignored.
        """
        for line in stream:
            if isinstance(line, (bytes, bytearray)):
                line = bytes(line).decode("latin-1")
            if not line.endswith("\n"):
                break
            m = _LOAD_LINE.match(line)
            if m is None:
                continue
            addr = int(m.group(1), 8) & _U32
            value = int(m.group(2), 8) & _U32 if m.group(2) else 0
            self.mem[addr] = value