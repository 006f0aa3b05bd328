from dmgcore.hardware import Button, Hardware, Interrupt, Reg


def make():
    hw = Hardware()
    hw.reset()
    return hw


def test_reset_values():
    hw = make()
    assert hw.regs[Reg.LCDC] == 0x91
    assert hw.regs[Reg.BGP] == 0xFC
    assert hw.regs[Reg.VBK] == 0xFE
    assert hw.regs[Reg.IF] == 0


def test_rising_edge_raises_if_once():
    hw = make()
    hw.interrupt(Interrupt.TIMER, Interrupt.TIMER)
    assert hw.regs[Reg.IF] == Interrupt.TIMER
    hw.regs[Reg.IF] = 0
    hw.interrupt(Interrupt.TIMER, Interrupt.TIMER)
    assert hw.regs[Reg.IF] == 0
    hw.interrupt(0, Interrupt.TIMER)
    assert hw.ilines == 0


def test_interrupt_wakes_halted_cpu():
    hw = make()
    hw.ime = True
    hw.halt = True
    hw.regs[Reg.IE] = Interrupt.VBLANK
    hw.interrupt(Interrupt.VBLANK, Interrupt.VBLANK)
    assert hw.halt is False


def test_masked_interrupt_keeps_halt():
    hw = make()
    hw.ime = True
    hw.halt = True
    hw.interrupt(Interrupt.VBLANK, Interrupt.VBLANK)
    assert hw.halt is True


def test_press_direction_raises_pad_interrupt():
    hw = make()
    hw.regs[Reg.P1] = 0x20
    hw.pad_refresh()
    assert hw.regs[Reg.P1] & 0x0F == 0x0F
    hw.press(Button.RIGHT)
    assert hw.regs[Reg.P1] & 0x0F == 0x0F & ~Button.RIGHT
    assert hw.regs[Reg.IF] & Interrupt.PAD
    assert hw.ilines & Interrupt.PAD == 0


def test_release_round_trip():
    hw = make()
    hw.regs[Reg.P1] = 0x10
    hw.set_button(Button.START, True)
    assert hw.pad == Button.START
    hw.set_button(Button.START, False)
    assert hw.pad == 0
    assert hw.regs[Reg.P1] & 0x0F == 0x0F