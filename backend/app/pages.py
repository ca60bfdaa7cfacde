from html import escape
from typing import List, Optional

from fastapi.responses import HTMLResponse

from .sandbox import FRAME_SANDBOX, build_runner_document, script_safe_json
from .schemas import Lesson, LessonSummary

PAGE_TEMPLATE = """<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8" />
  <meta name="viewport" content="width=device-width,initial-scale=1" />
  <title>{title}</title>
</head>
<body{body_attrs}>
  <header class="topbar">
    <a class="brand" href="/">JavaScript lessons</a>
    <div class="progress" aria-label="Progress">
      <progress id="progressBar" max="100" value="0"></progress>
      <span id="progressLabel">0%</span>
    </div>
  </header>

  <main class="container">
{content}
  </main>

  <script src="/core/progress.js"></script>
  <script src="/core/app.js"></script>
</body>
</html>
"""

CARD_TEMPLATE = """    <article class="card" data-lesson-id="{id}">
      <h3>{title}</h3>
      <p class="meta">{track} &middot; {difficulty}</p>
      <span class="done-badge" hidden>Completed</span>
      <a class="btn" href="/lessons/{id}">Start</a>
    </article>"""

LESSON_TEMPLATE = """    <section class="lesson">
      <h1>{title}</h1>
      <p class="meta">{track} &middot; {difficulty}</p>
      <div class="lesson-body">{body_html}</div>
      <div class="row">
        <button class="btn" id="markComplete" type="button">Mark as completed</button>
      </div>
      <nav class="row">
{nav}
      </nav>
    </section>

    <section class="workspace">
      <textarea id="codeEditor" rows="16" spellcheck="false">{starter_code}</textarea>
      <div class="row">
        <button class="btn" id="resetCode" type="button">Reset code</button>
        <button class="btn" id="showSolution" type="button">Solution</button>
        <button class="btn" id="runCode" type="button">Run code</button>
      </div>
      <iframe id="runner" title="sandbox" sandbox="{sandbox}" srcdoc="{srcdoc}"></iframe>
    </section>

    <script type="application/json" id="lessonData">{lesson_json}</script>"""


def render_page(title: str, content: str, status_code: int = 200, **data_attrs) -> HTMLResponse:
    body_attrs = "".join(
        f' data-{name.replace("_", "-")}="{escape(str(value))}"' for name, value in data_attrs.items()
    )
    html = PAGE_TEMPLATE.format(title=escape(title), body_attrs=body_attrs, content=content)
    return HTMLResponse(content=html, status_code=status_code)


def catalog_page(lessons: List[LessonSummary]) -> HTMLResponse:
    if lessons:
        cards = "\n".join(
            CARD_TEMPLATE.format(
                id=lesson.id,
                title=escape(lesson.title),
                track=escape(lesson.track),
                difficulty=escape(lesson.difficulty),
            )
            for lesson in lessons
        )
    else:
        cards = '    <p class="note">No lessons yet.</p>'
    content = f'    <div class="grid" id="catalog">\n{cards}\n    </div>'
    return render_page("Lessons", content, total_lessons=len(lessons))


def lesson_page(
    lesson: Lesson,
    body_html: str,
    total_lessons: int,
    previous_id: Optional[int],
    next_id: Optional[int],
) -> HTMLResponse:
    nav = []
    if previous_id is not None:
        nav.append(f'        <a class="btn" id="prevLesson" href="/lessons/{previous_id}">Previous</a>')
    if next_id is not None:
        nav.append(f'        <a class="btn" id="nextLesson" href="/lessons/{next_id}">Next</a>')
    content = LESSON_TEMPLATE.format(
        title=escape(lesson.title),
        track=escape(lesson.track),
        difficulty=escape(lesson.difficulty),
        body_html=body_html,
        nav="\n".join(nav),
        starter_code=escape(lesson.starter_code),
        sandbox=FRAME_SANDBOX,
        srcdoc=escape(build_runner_document(lesson.starter_code)),
        lesson_json=script_safe_json(
            {"id": lesson.id, "starterCode": lesson.starter_code, "solution": lesson.solution}
        ),
    )
    return render_page(
        lesson.title, content, lesson_id=lesson.id, total_lessons=total_lessons
    )


def error_page(title: str, message: str, status_code: int) -> HTMLResponse:
    content = f"""    <div class="card">
      <h1>{escape(title)}</h1>
      <p>{escape(message)}</p>
      <a class="btn" href="/">Back to lessons</a>
    </div>"""
    return render_page(title, content, status_code=status_code)
