# groupbot

The logic behind a set of group chat bot features, kept apart from any chat
protocol. Each module does one job and returns plain Python values or raises
an exception; sending the results to a chat is left to the caller.

Anything that depends on the clock or on chance takes it as an argument
(`now`, `today`, `rng`), so results can be reproduced in tests.

## Modules

| Module | What it does |
| --- | --- |
| `groupbot.runcode` | Sends a snippet to an online compiler (`run_code`), tidies the output (`clear_newline_suffix`, `cut_too_long`) and answers a whole `>runcode` / `>runcoderaw` message (`respond`). `resolve_language` and `template_for` look up the supported languages. |
| `groupbot.wtf` | A fixed table of quiz queries (`TABLE`, `new_wtf`, `list_text`); `Wtf.predict(*names)` runs one on the remote site. |
| `groupbot.reborn` | `WeightedChooser`, `load_areas` / `build_area_chooser` for a JSON list of `{name, weight}` areas, `random_gender` and `reincarnate`. |
| `groupbot.marriage` | `MarriageRegistry`: a one-table-per-group SQLite registry with `check_update`, `reset`, `register`, `remarry`, `lookup`, `roster`, `divorce_wife`, `divorce_husband`. `lookup` returns a `Couple` and a `Status`. |
| `groupbot.marriage_rules` | The checks around the marriage commands: `ensure_today`, `check_single`, `check_mistress`, `check_fiancee`, `pick_wife`, and a per-key `CooldownManager` (12 hours by default). Refusals raise `RuleRejection` carrying the reply text. |
| `groupbot.sleep` | `SleepDB` with `sleep` and `get_up`, returning today's position and the elapsed time; `is_morning`, `is_evening`, `time_duration`, `good_morning_text`, `good_night_text`. |
| `groupbot.score` | `ScoreDB` (scores and sign-in counts), `sign_in` returning a `SignInResult`, plus `get_level`, `next_level_score` and `hour_word`. Scores are capped at `SCOREMAX` (120). |
| `groupbot.tarot` | `TarotDeck.from_json` loads cards and spreads; `draw`, `explain` and `lay_out`; `card_image_url` builds a card picture URL. |
| `groupbot.zaobao` | `DailyNewsCache` keeps a fetched picture for up to 8 hours within the same day; `fetch_news_image` downloads today's news picture. |
| `groupbot.wordcount` | `load_stopwords`, `is_countable`, `count_words`, `rank_by_word_count`, `clamp_message_count`. |
| `groupbot.wordle` | `WordleGame` with `guess`, `marks` and `render` (a PNG board), `score_guess`, `class_for` and the `Mark` enum. |
| `groupbot.vtb_db` | `VtbDB`: voice clips in three category levels, menus for each level, `random_vtb`, and `fetch_vtb_list` / `store_vtb` to download and store the catalogue. |
| `groupbot.vtb` | `QuoteSession` walks a user through the three menus by number; `escape_record_url`, `record_filename` and `download_record` handle the chosen clip. |
| `groupbot.ymgal` | `YmgalDB` for picture sets (`upsert`, `get_by_id`, `random`, `search`), HTML parsers for the site's pages, and `update_pictures` to scrape new sets. |

## Examples

Tracking sleep in a group:

```python
from datetime import datetime
from groupbot.sleep import SleepDB, is_evening, good_night_text

db = SleepDB("sleep.db")
now = datetime(2022, 6, 13, 23, 30)
if is_evening(now):
    position, awake = db.sleep(gid=1001, uid=42, now=now)
    print(good_night_text(position, awake))
db.close()
```

Playing Wordle:

```python
from groupbot.wordle import WordleGame, WordleError

game = WordleGame("apple", dictionary=["apple", "angle", "ample"])
try:
    game.guess("angle")
except WordleError as exc:
    print("rejected:", exc)
print(game.marks())
png = game.render()
```

Drawing tarot cards:

```python
import random
from groupbot.tarot import TarotDeck

deck = TarotDeck.from_json(cards_json, formations_json)
for index, card, reversed_ in deck.draw(3, random.Random()):
    print(index, card.name, reversed_)
```

Checking a proposal before registering it:

```python
from datetime import date
from groupbot.marriage import MarriageRegistry
from groupbot.marriage_rules import RuleRejection, check_single

registry = MarriageRegistry("marriage.db")
today = date.today()
try:
    check_single(registry, gid=1001, uid=42, fiancee=43, today=today)
    registry.register(1001, 42, 43, "alice", "bob", today)
except RuleRejection as exc:
    print(exc)
```

## Configuration

`groupbot.runcode` reads the compiler service token from the
`RUNCODE_TOKEN` environment variable.

## Errors

Failures are raised rather than returned: `RunCodeError`, `WtfError`,
`RegistryError`, `RuleRejection`, `TarotError` and the `WordleError` family
(`WrongLength`, `UnknownWord`, `TimesRunOut`). Network failures from the
remote services surface as `requests` exceptions where a module does not
wrap them.

## What this package does not do

- It does not connect to any chat service, parse chat events or send
  messages; there is no bot process or command to run.
- It draws no pictures other than the Wordle board: the marriage roster,
  sign-in card, score ranking and hot-word charts are returned as data only.
- It does not segment text into words or fetch chat history; `count_words`
  expects already segmented slices.
- Data files are not bundled: the tarot card and spread JSON, the Wordle word
  lists, the reborn area weights and the stopword list must be supplied by the
  caller.

## Tests

The test suite uses pytest; install the `test` extra to get it.