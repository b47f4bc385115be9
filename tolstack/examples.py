"""Built-in example stacks for demonstration."""

from tolstack.models import Dimension, Goal, Stack


def create_bracket_example() -> tuple[Stack, Goal]:
    """Fastener protrusion through a bracket, lug and washer.

    A boss on a pedestal locates a lug through a hole; a washer sits on
    the lug and a fastener clamps the stack. The result is the gap left
    under the fastener head, which must stay between 0 and .480 in.

    Dimension loop:
        -Pedestal to datum A
        +Datum A to boss
        +Boss in hole (positional play)
        -Hole to edge of lug
        +Lug thickness
        +Washer thickness
        -Fastener length
        = Gap
    """
    stack = Stack(name="Bracket Fastener Gap", units="in")

    stack.add_feature("Pedestal to datum A",
                      Dimension.bilateral(".750", "+.010", "-.015"), -1)
    stack.add_feature("Datum A to boss",
                      Dimension.band("3.25", ".005"), 1)
    stack.add_feature("Boss in hole",
                      Dimension.assembly_shift(
                          inside=Dimension.bilateral(".625", "0", "-.010"),
                          outside=Dimension.symmetric(".750", ".010"),
                      ), 1)
    stack.add_feature("Distance from hole to edge",
                      Dimension.symmetric("1.75", ".015"), -1)
    stack.add_feature("Thickness of lug",
                      Dimension.symmetric("0.75", ".005"), 1)
    stack.add_feature("Thickness of washer",
                      Dimension.limits(".135", ".120"), 1)
    stack.add_feature("Length of fastener",
                      Dimension.symmetric("1.25", ".005"), -1)

    goal = Goal(0, ".48", "in")
    return stack, goal
