# ---- Agent terminal output, shaped the way it arrives from the PTY ----

# Busy status line with the activity star and cursor-forward word spacing
THINKING_ANSI = (
    "\x1b[?25l\x1b[38;5;174m✻\x1b[39m\x1b[1CThinking…\x1b[1C"
    "\x1b[38;5;246m(esc\x1b[1Cto\x1b[1Cinterrupt)\x1b[39m\r\n"
)

# Tool invocation followed by its collapsed result
TOOL_ANSI = (
    "\x1b[38;5;114m⏺\x1b[39m\x1b[1C\x1b[1mRead\x1b[22m(src/app.ts)\r\n"
    "\x1b[2C⎿\x1b[1C\x1b[1CRead\x1b[1C\x1b[1m120\x1b[22m\x1b[1Clines\x1b[1C"
    "(ctrl+r\x1b[1Cto\x1b[1Cexpand)\r\n"
)

BASH_CALL_ANSI = "\x1b[38;5;114m⏺\x1b[39m\x1b[1C\x1b[1mBash\x1b[22m(npm\x1b[1Ctest)\r\n"

BASH_RUNNING_ANSI = "\x1b[2C⎿\x1b[1C\x1b[1CRunning…\r\n"

# Permission box asking to run a shell command
PERMISSION_ANSI = (
    "\x1b[38;5;174m╭──────────────────╮\x1b[39m\r\n"
    "│\x1b[1C\x1b[1mBash\x1b[1Ccommand\x1b[22m\r\n"
    "│\x1b[3Cnpm\x1b[1Ctest\r\n"
    "│\r\n"
    "│\x1b[1CDo\x1b[1Cyou\x1b[1Cwant\x1b[1Cto\x1b[1Cproceed?\r\n"
    "│\x1b[1C\x1b[38;5;153m❯\x1b[1C1.\x1b[1CYes\x1b[39m\r\n"
    "│\x1b[3C2.\x1b[1CYes,\x1b[1Cand\x1b[1Cdon't\x1b[1Cask\x1b[1Cagain\r\n"
    "│\x1b[3C3.\x1b[1CNo,\x1b[1Cand\x1b[1Ctell\x1b[1CClaude\x1b[1Cwhat\x1b[1Cto\x1b[1Cdo\r\n"
    "\x1b[38;5;174m╰──────────────────╯\x1b[39m\r\n"
)

# Input box drawn when the agent is ready for the next task
IDLE_ANSI = (
    "\x1b[2m────────────────────\x1b[22m\r\n"
    "\x1b[38;5;246m❯\x1b[39m\x1b[1C\r\n"
    "\x1b[2m────────────────────\x1b[22m\r\n"
    "\x1b[2C\x1b[38;5;246m?\x1b[1Cfor\x1b[1Cshortcuts\x1b[39m\r\n"
)

# Chooser of the ask-the-user tool
QUESTION_ANSI = (
    "☐\x1b[1CFramework\r\n"
    "\r\n"
    "Which\x1b[1Ctest\x1b[1Cframework\x1b[1Cshould\x1b[1CI\x1b[1Cuse?\r\n"
    "\r\n"
    "\x1b[38;5;153m❯\x1b[1C1.\x1b[1Cpytest\x1b[39m\r\n"
    "\x1b[3C2.\x1b[1Cunittest\r\n"
    "\x1b[3C3.\x1b[1CType\x1b[1Csomething.\r\n"
    "\r\n"
    "Enter\x1b[1Cto\x1b[1Cselect\x1b[1C·\x1b[1C↑/↓\x1b[1Cto\x1b[1Cnavigate"
    "\x1b[1C·\x1b[1CEsc\x1b[1Cto\x1b[1Ccancel\r\n"
)

# Plain shell session, no agent running
SHELL_ANSI = "\x1b[32muser@host\x1b[0m:~/proj$ ls\r\nREADME.md  src\r\n\x1b[32muser@host\x1b[0m:~/proj$ "

# A full turn: thinking, a tool call, then an approval prompt
APPROVAL_TURN_ANSI = THINKING_ANSI + TOOL_ANSI + BASH_CALL_ANSI + PERMISSION_ANSI
