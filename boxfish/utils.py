def color_text(text, color_code):
    return f"\033[{color_code}m{text}\033[0m"

def debug_text(text):
    return f"{color_text('DEBUG', '31')} {text}"

def info_text(text):
    return f"{color_text('INFO', '34')}  {text}"

def score_line(state):
    return (
        f"AI {state.score_ai} - {state.score_opponent} Opponent "
        f"({state.current_player.name.lower()} to move)"
    )
