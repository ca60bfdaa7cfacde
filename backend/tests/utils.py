import json


def write_json_lesson(root, lesson_id, title, filename=None, **fields):
    data = {
        "id": lesson_id,
        "title": title,
        "body": f"About {title}",
        "starterCode": "// todo",
        "solution": "print('done')",
    }
    data.update(fields)
    path = root / (filename or f"{lesson_id}.json")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data))
    return path


def write_text_lesson(root, filename, header, body):
    lines = ["---"] + [f"{key}: {value}" for key, value in header.items()] + ["---", body]
    path = root / filename
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\n".join(lines))
    return path
