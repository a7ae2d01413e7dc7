"""
Cost arithmetic for workshop projects.

Board lengths are entered in varas (1 Costa Rican vara = 33 inches) while
width and thickness are in inches, so a board foot is

    width x thickness x (length x 33) / 144

Every price, total and dashboard figure in the API is computed here so the
formulas exist exactly once.
"""
from decimal import Decimal

VARA_TO_INCHES = Decimal('33')
CUBIC_INCHES_PER_BOARD_FOOT = Decimal('144')
ZERO = Decimal('0')


def to_decimal(value) -> Decimal:
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def board_feet(width, thickness, length, quantity=1) -> Decimal:
    """Board feet of ``quantity`` boards measuring width x thickness (in) x length (varas)"""
    length_in_inches = to_decimal(length) * VARA_TO_INCHES
    per_board = to_decimal(width) * to_decimal(thickness) * length_in_inches / CUBIC_INCHES_PER_BOARD_FOOT
    return per_board * to_decimal(quantity)


def unit_price(price, package_quantity) -> Decimal:
    """Price of one item from a package; 0 for an empty package"""
    package_quantity = to_decimal(package_quantity)
    if package_quantity <= 0:
        return ZERO
    return to_decimal(price) / package_quantity


def finish_cost(price, percentage_used) -> Decimal:
    """Share of a finish container consumed by a project"""
    return to_decimal(price) * to_decimal(percentage_used) / Decimal('100')


def board_cost(board) -> Decimal:
    lumber = board.lumber
    cost_per_board_foot = lumber.cost_per_board_foot if lumber is not None else ZERO
    return board_feet(board.width, board.thickness, board.length, board.quantity) * to_decimal(cost_per_board_foot)


def total_board_feet(boards) -> Decimal:
    return sum((board_feet(b.width, b.thickness, b.length, b.quantity) for b in boards), ZERO)


def material_cost(boards) -> Decimal:
    return sum((board_cost(b) for b in boards), ZERO)


def finishes_cost(project_finishes) -> Decimal:
    return sum((finish_cost(pf.finish.price, pf.percentage_used) for pf in project_finishes), ZERO)


def sheet_goods_cost(project_sheet_goods) -> Decimal:
    return sum((to_decimal(psg.sheet_good.price) * psg.quantity for psg in project_sheet_goods), ZERO)


def consumables_cost(project_consumables) -> Decimal:
    return sum(
        (unit_price(pc.consumable.price, pc.consumable.package_quantity) * pc.quantity for pc in project_consumables),
        ZERO,
    )


def project_costs(project) -> dict:
    """
    Full cost breakdown of a project.

    Uses the prefetched related managers when available, so callers that
    list many projects should prefetch boards__lumber, project_finishes__finish,
    project_sheet_goods__sheet_good and project_consumables__consumable.
    """
    boards = list(project.boards.all())
    breakdown = {
        'total_board_feet': total_board_feet(boards),
        'material_cost': material_cost(boards),
        'finish_cost': finishes_cost(project.project_finishes.all()),
        'sheet_goods_cost': sheet_goods_cost(project.project_sheet_goods.all()),
        'consumable_cost': consumables_cost(project.project_consumables.all()),
        'labor_cost': to_decimal(project.labor_cost),
        'misc_cost': to_decimal(project.misc_cost),
    }
    breakdown['total_cost'] = (
        breakdown['material_cost']
        + breakdown['finish_cost']
        + breakdown['sheet_goods_cost']
        + breakdown['consumable_cost']
        + breakdown['labor_cost']
        + breakdown['misc_cost']
    )
    return breakdown


def average_cost_per_board_foot(total_cost, board_feet_total) -> Decimal:
    board_feet_total = to_decimal(board_feet_total)
    if board_feet_total <= 0:
        return ZERO
    return to_decimal(total_cost) / board_feet_total
