import os

import dotenv
import httpx

from eventsource_parse import ParseOptions, iter_lines, iter_response_messages

dotenv.load_dotenv()

url = os.environ["EVENTSOURCE_PARSE_URL"]
options = ParseOptions(debug=True)

with httpx.stream("GET", url, headers={"Accept": "text/event-stream"}, timeout=60.0) as r:
    print("status=", r.status_code, "content-type=", r.headers.get("content-type"))

    if os.getenv("DEBUG_RAW_LINES", "").lower() in {"1", "true", "yes", "on"}:
        for i, line in enumerate(iter_lines(r.iter_bytes(), options=options)):
            print("i=", i, "separator_offset=", line.separator_offset, "raw=", repr(line.data))
            if i >= 30:
                break
    else:
        for i, message in enumerate(iter_response_messages(r, options=options)):
            print("i=", i, "repr=", repr(message))
            if i >= 30:
                break
