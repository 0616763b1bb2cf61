"""
Seeds angr states from a state file snapshot.

Range inits carry the angr memory plugin they should be stored into as their
target, so they can be produced once and applied directly.
"""
import logging

import angr
import claripy

l = logging.getLogger(name=__name__)

# UserRegisters fields that map one-to-one onto angr's x86 registers
GP_REGISTERS = ('eax', 'ebx', 'ecx', 'edx', 'esi', 'edi', 'ebp', 'esp', 'eip')

def apply_range_inits(inits):
    """
    Store each MemoryInit into its target memory as a concrete byte.

    Args:
        inits: MemoryInit facts whose target is an angr memory plugin
            (e.g. state.memory)

    Returns:
        Number of bytes stored
    """
    count = 0
    for init in inits:
        init.target.store(init.address, claripy.BVV(init.value, 8))
        count += 1
    l.debug(f"Applied {count} memory inits")
    return count

def load_registers(state, registers):
    """Copy the general purpose registers and eip of a snapshot into an x86 state"""
    for name in GP_REGISTERS:
        setattr(state.regs, name, claripy.BVV(getattr(registers, name), 32))

def snapshot_state(proj, state_iface, ranges, **state_kwargs):
    """
    Build a blank state holding the snapshot's registers and memory.

    Args:
        proj: An angr project for a 32-bit x86 target, or the path of a
            binary to load one from
        state_iface: Open StateInterface
        ranges: Inclusive (first, last) address ranges to copy into memory
        **state_kwargs: Passed on to proj.factory.blank_state

    Returns:
        The initialized angr state
    """
    if isinstance(proj, str):
        proj = angr.Project(proj, auto_load_libs=False)
    if proj.arch.name != "X86":
        raise ValueError(f"register snapshots are 32-bit x86, project is {proj.arch.name}")
    state = proj.factory.blank_state(**state_kwargs)
    if state_iface.has_registers:
        load_registers(state, state_iface.registers)
    else:
        l.info("Snapshot has no registers, leaving them unconstrained")
    count = apply_range_inits(state_iface.range_inits(ranges, state.memory))
    l.info(f"Seeded state with {count} bytes from {state_iface.name}")
    return state