# filename: command_core.py

import heapq
from collections import Counter
from itertools import count


class HuffmanNode:
    """A node in the command merge tree.

    Leaves carry a command; internal nodes carry ``command=None`` and own
    exactly two children. ``order`` is the creation sequence number used to
    break ties between equal weights.
    """

    __slots__ = ("command", "freq", "order", "left", "right")

    def __init__(self, command, freq, order):
        self.command = command
        self.freq = freq
        self.order = order
        self.left = None
        self.right = None

    def is_leaf(self):
        return self.left is None and self.right is None

    def __lt__(self, other):
        return (self.freq, self.order) < (other.freq, other.order)

    def __repr__(self):
        return f"HuffmanNode({self.command!r}, {self.freq}, order={self.order})"


class CommandCodeLogic:
    def count_frequencies(self, commands):
        """Count occurrences of each command, enumerated in ascending command order."""
        if not commands:
            return {}
        freqs = Counter(commands)
        return {command: freqs[command] for command in sorted(freqs)}

    def build_tree(self, freqs):
        if not freqs:
            return None

        sequence = count()
        # Leaves are created in sorted order so equal weights always pop the same way
        priority_queue = [
            HuffmanNode(command, freqs[command], next(sequence))
            for command in sorted(freqs)
        ]
        heapq.heapify(priority_queue)

        while len(priority_queue) > 1:
            left = heapq.heappop(priority_queue)
            right = heapq.heappop(priority_queue)
            merged = HuffmanNode(None, left.freq + right.freq, next(sequence))
            merged.left = left
            merged.right = right
            heapq.heappush(priority_queue, merged)

        return priority_queue[0]

    def generate_codes(self, root):
        """Walk the tree with an explicit stack and map each leaf command to its path.

        A tree made of a single leaf yields an empty code for that command.
        """
        codes = {}
        if root is None:
            return codes

        stack = [(root, "")]
        while stack:
            node, code = stack.pop()
            if node.is_leaf():
                codes[node.command] = code
                continue
            stack.append((node.right, code + "1"))
            stack.append((node.left, code + "0"))
        return codes


def get_codes_from_commands(commands):
    """Generate the command -> bit string table for one command log."""
    if not commands:
        return {}
    logic = CommandCodeLogic()
    freqs = logic.count_frequencies(commands)
    tree = logic.build_tree(freqs)
    return logic.generate_codes(tree)


def weighted_code_length(freqs, codes):
    return sum(freq * len(codes[command]) for command, freq in freqs.items())
