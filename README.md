# groupfun

Small entertainment features for group chat bots. Each module holds the
logic of one feature: the game rules, the SQLite storage, the calls to
public web services and the reply texts. Hooking them up to incoming chat
messages is left to the bot that uses them.

## Installing

Python 3.10 or later. The package depends on `requests`, `pillow` and
`lxml`; the `test` extra adds `pytest` and `responses`.

## Modules

| Module | What it holds |
| --- | --- |
| `groupfun.wordle` | `WordleGame`: guesses checked against a dictionary, board drawn as PNG bytes by `render()`; `class_for` maps `""`, `五阶`, `六阶`, `七阶` to word lengths 5, 6, 7; `load_dictionary` |
| `groupfun.runcode` | `run_code` posts a snippet to an online compiler; `handle_command` answers a `>runcode` / `>runcoderaw` message; `cut_too_long`, `clear_newline_suffix`, `lookup_language`, `template_for` |
| `groupfun.wtf` | `TABLE` of `Wtf` tests, `new_wtf(index)`, `list_text()`, and `Wtf.predict(*names)` which queries the remote generator |
| `groupfun.marriage` | `MarriageRegistry` (SQLite), `Status`, `MarriageRecord`, `SkillCooldown`, and the checks `check_single`, `check_mistress`, `pick_bride`, `slice_name` |
| `groupfun.score` | `ScoreDB` of scores and sign-in counts, `get_level`, `next_level_score`, `get_hour_word` |
| `groupfun.sleep` | `SleepDB` with `sleep` / `get_up`, `time_duration`, `is_morning`, `is_evening`, `morning_text`, `evening_text` |
| `groupfun.vtb_model` | `VtbDB`: vtubers, quotation categories and clips; download with `fetch_vtb_list` / `store_vtb` |
| `groupfun.vtb_quotation` | `QuotationSession` for the three-step choice, `escape_record_url`, `record_file_name`, `download_record` |
| `groupfun.ymgal` | `YmgalDB` of picture sets, HTML parsers, `update_pictures`, `forward_messages` |
| `groupfun.tarot` | `load_cards`, `draw_cards`, `build_info_map`, `interpret`, `parse_count` |
| `groupfun.reborn` | `WeightedChooser`, `load_rates`, `reborn_message` |
| `groupfun.wordcount` | `load_stopwords`, `count_words`, `rank_by_word_count`, `clamp_message_count` |
| `groupfun.shadiao` | `fetch_text(kind)` for `哄我`, `来碗毒鸡汤`, `发个朋友圈`, `来碗绿茶`, `渣我`, `讲个段子`; `ergofabulous_insult`, `hot_comment`, `parse_duanzi` |
| `groupfun.zaobao` | `NewsCache`, which keeps the daily news picture for up to eight hours within the same day |
| `groupfun.thesaurus` | `Thesaurus` and `load_thesaurus`: a phrase to a random canned reply |
| `groupfun.tiangou` | `TiangouDiary`: a random line from a SQLite table |

Functions that draw at random take a `random.Random`, so results can be
reproduced with a seeded generator.

## Examples

Sign-in levels follow fixed score thresholds:

```python
from groupfun.score import get_level

get_level(5)    # 3
get_level(120)  # 10
```

Trimming the output of a code run:

```python
from groupfun.runcode import clear_newline_suffix

clear_newline_suffix("hello\n\n")  # "hello"
```

The compiler service token is read from the `GROUPFUN_RUNOOB_TOKEN`
environment variable.

Splitting a duration for the sleep report:

```python
from datetime import timedelta
from groupfun.sleep import time_duration

time_duration(timedelta(hours=7, minutes=5, seconds=9))  # (7, 5, 9)
```

A round of the word game:

```python
from groupfun.wordle import WordleGame, UnknownWordError

game = WordleGame("apple", ["angle", "apple", "ample"])
try:
    won = game.guess("angle")
except UnknownWordError:
    ...  # the guess is not in the dictionary
png = game.render()
```

A wrong guess of the wrong length raises `LengthNotEnoughError`, and the
guess that uses up the last of the `len(target) + 1` tries raises
`TimesRunOutError`.

The marriage registry keeps every group's couples in one SQLite file:

```python
from groupfun.marriage import MarriageRegistry, Status

with MarriageRegistry("marriage.db") as registry:
    registry.register(1000, 1, 2, "Alice", "Bob")
    record, status = registry.lookup(1000, 1)  # status is Status.USER
```

## Errors

Errors are raised as exceptions: `WordleError` and its subclasses for the
word game, `RunCodeError` for unknown languages and failed code runs,
`WtfError` when a test cannot be run, `LookupError` where there is nothing
to pick (no single members left, no picture set, no diary lines), and
`ValueError` for bad input such as a tarot count out of range.

## What the package does not do

- It does not connect to any chat platform, parse chat events or send
  messages; apart from `runcode.handle_command` it has no command
  dispatcher, and it installs no command-line program.
- It draws no images other than the word game board: there is no marriage
  roster picture, sign-in card or score and hot-word bar charts.
- It does not fetch group message history or split messages into words;
  `count_words` takes the texts and a segmenting function from the caller.
- `update_pictures` takes a `fetch` function that returns a page's HTML;
  the package does not download the picture set pages itself.
- It ships no data files: the tarot card table, the country rates, the
  thesaurus, the stop words, the word lists and the diary database are
  loaded from data the caller provides.