"""
Human-readable rendering of state file headers, registers and blocks.
"""
import sys

from tabulate import tabulate

REGISTER_ROWS = [
    ("EAX", 'eax', 8), ("EBX", 'ebx', 8), ("ECX", 'ecx', 8), ("EDX", 'edx', 8),
    ("ESI", 'esi', 8), ("EDI", 'edi', 8), ("EBP", 'ebp', 8), ("ESP", 'esp', 8),
    ("EIP", 'eip', 8), ("EFLAGS", 'eflags', 8),
    ("CS", 'xcs', 4), ("DS", 'xds', 4), ("ES", 'xes', 4),
    ("FS", 'xfs', 4), ("GS", 'xgs', 4), ("SS", 'xss', 4),
]

def format_flags(flags):
    rows = [
        ["SnapshotType", "process" if flags.process_snapshot else "system"],
        ["AddrType", "virtual" if flags.virtual_addresses else "physical"],
        ["IncludesRegisters", flags.includes_registers],
        ["IncludesKernelMemory", flags.includes_kernel_mem],
        ["IncludesTaint", flags.includes_taint],
    ]
    return "Flags:\n" + tabulate(rows, tablefmt="plain")

def format_header(header):
    rows = [["Version", header.version], ["WordSize", header.word_size]]
    return tabulate(rows, tablefmt="plain") + "\n" + format_flags(header.flags)

def format_registers(registers):
    rows = [[label, f"0x{getattr(registers, field) & 0xFFFFFFFF:0{width}x}"]
            for (label, field, width) in REGISTER_ROWS]
    return tabulate(rows, tablefmt="plain")

def format_blocks(blocks, show_pos=False, show_taint=False):
    """
    Tabulate blocks, one row each.

    Args:
        blocks: MemoryBlocks to list
        show_pos: Add the file offset of each block's data
        show_taint: Add the number of taint regions with taint and the
            number of tainted bytes
    """
    headers = ["First", "Last", "Size"]
    if show_pos:
        headers.append("Offset")
    if show_taint:
        headers += ["NumTB", "TaintedBytes"]

    table_data = []
    for block in blocks:
        row = [f"0x{block.first:08x}", f"0x{block.last:08x}", block.size]
        if show_pos:
            row.append(block.payload_offset)
        if show_taint:
            row += [sum(1 for region in block.taint if region.mask != 0), block.num_tainted_bytes]
        table_data.append(row)
    return tabulate(table_data, headers=headers, tablefmt="simple")

def print_report(state_iface, show_blocks=True, show_pos=False, show_taint=False, file=None):
    """Print header, registers (when captured) and the block list of an open state file"""
    out = file if file is not None else sys.stdout
    print(format_header(state_iface.header), file=out)
    if state_iface.has_registers:
        print("\nRegisters:", file=out)
        print(format_registers(state_iface.registers), file=out)
    print(f"\nBlocks: {state_iface.num_blocks}", file=out)
    if show_blocks and state_iface.num_blocks:
        print(format_blocks(state_iface.blocks(), show_pos=show_pos, show_taint=show_taint), file=out)
