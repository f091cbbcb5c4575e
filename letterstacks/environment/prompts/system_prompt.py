SYSTEM_PROMPT_TEMPLATE = """You are playing Letter Stacks, a real-time word game on a {rows}x{cols} grid of letter stacks.

## Rules
1. Every cell holds a stack of letters. Only the top letter of each stack is visible and playable.
2. Letters keep landing on cells on a timer. Cells marked `*` receive the next letters.
3. If any stack reaches height {ceiling}, you lose.
4. Form a word by listing cells in reading order. The word is made of their top letters.
5. Words must be at least 3 letters and in the dictionary.
6. A valid word removes the top letter from every cell used.
7. Clear every cell to win.

## Tempo
- 3-letter words make the next spawn come 3 seconds sooner.
- 4-letter words keep the normal pace.
- Words of 5+ letters give you 3 extra seconds before the next spawn.
- Time keeps running while you think. The board may change before your word is checked.

## Actions
- **SUBMIT**: Submit the cells in <tiles> as a word
- **DROP**: Land the next pending letter now and restart the timer
- **WAIT**: Do nothing this turn

## Response Format
Always respond with these tags:

<game_plan>
Which stacks are dangerous and what word you are playing
</game_plan>

<action>SUBMIT|DROP|WAIT</action>

<tiles>12 3 7</tiles>

## Board Format
Each cell is shown as `INDEX:LETTERHEIGHT`, e.g. `07:K3` means cell 7 shows K on a stack of 3.
Empty cells show `.`. Pending spawn cells end with `*`.

# GOAL
Keep every stack below {ceiling} and clear the board.
"""


def get_system_prompt(rows: int = 6, cols: int = 5, ceiling: int = 6) -> str:
    """Return the system prompt for a board size and ceiling."""
    return SYSTEM_PROMPT_TEMPLATE.format(rows=rows, cols=cols, ceiling=ceiling)
