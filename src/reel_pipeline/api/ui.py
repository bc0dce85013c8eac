from __future__ import annotations

from html import escape

_PAGE = """
<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <title>__APP_NAME__ Jobs Console</title>
  <link
    href="https://fonts.googleapis.com/css2?family=Space+Grotesk:wght@400;500;700&display=swap"
    rel="stylesheet"
  >
  <link
    href="https://fonts.googleapis.com/css2?family=IBM+Plex+Mono:wght@400;500&display=swap"
    rel="stylesheet"
  >
  <style>
    :root {
      --bg: #f3efe6;
      --panel: #fffaf0;
      --ink: #112433;
      --muted: #5c6b74;
      --accent: #0f8b8d;
      --accent-strong: #136f63;
      --line: #d7d1c3;
      --warn: #b00020;
    }
    * { box-sizing: border-box; }
    body {
      margin: 0;
      min-height: 100vh;
      font-family: "Space Grotesk", sans-serif;
      color: var(--ink);
      background:
        radial-gradient(circle at 10% 10%, #b6e3df 0%, transparent 45%),
        radial-gradient(circle at 90% 85%, #ffd3a8 0%, transparent 42%),
        var(--bg);
    }
    .wrap { max-width: 1100px; margin: 24px auto; padding: 0 16px 24px; display: grid; gap: 16px; }
    .hero, .card {
      background: var(--panel);
      border: 1px solid var(--line);
      border-radius: 16px;
      box-shadow: 0 8px 22px rgba(17, 36, 51, 0.08);
    }
    .hero { padding: 20px; }
    .title { margin: 0; font-size: clamp(1.3rem, 2.5vw, 2rem); }
    .sub { margin: 6px 0 0; color: var(--muted); }
    .card { padding: 16px; }
    .form { display: grid; grid-template-columns: 2fr 1fr 2fr auto auto; gap: 10px; align-items: end; }
    label { display: block; margin-bottom: 6px; font-weight: 700; font-size: 0.92rem; }
    input[type=text], input[type=number] {
      width: 100%;
      border: 1px solid var(--line);
      border-radius: 12px;
      padding: 10px 12px;
      font-family: "IBM Plex Mono", monospace;
      background: #fff;
    }
    button {
      border: none;
      border-radius: 10px;
      padding: 10px 14px;
      font-family: "Space Grotesk", sans-serif;
      font-weight: 700;
      cursor: pointer;
    }
    button:disabled { opacity: 0.4; cursor: default; }
    .primary { background: var(--accent); color: #fff; }
    .secondary { background: #edf6f5; color: var(--accent-strong); }
    table { width: 100%; border-collapse: collapse; font-size: 0.9rem; }
    th, td { text-align: left; padding: 8px; border-bottom: 1px solid var(--line); vertical-align: top; }
    .pill {
      display: inline-block;
      font-family: "IBM Plex Mono", monospace;
      font-size: 0.75rem;
      border: 1px solid var(--line);
      border-radius: 999px;
      padding: 3px 8px;
      margin: 1px;
      background: #fff;
    }
    .pill.ready { background: #e3f5ef; color: var(--accent-strong); }
    .pill.running { background: #fff4d6; }
    .pill.error { background: #ffe8ec; color: var(--warn); }
    .pill.locked { color: var(--muted); }
    .status { margin: 8px 0 0; font-family: "IBM Plex Mono", monospace; font-size: 0.9rem; }
    .status.error { color: var(--warn); }
    @media (max-width: 780px) { .form { grid-template-columns: 1fr; } }
  </style>
</head>
<body>
  <main class="wrap">
    <section class="hero">
      <h1 class="title">__APP_NAME__ Jobs Console</h1>
      <p class="sub">Turn an idea into script, video, audio and captions, then publish.</p>
    </section>

    <section class="card">
      <div class="form">
        <div><label for="topic">Topic</label><input type="text" id="topic" value="How to brand a small cafe"></div>
        <div><label for="duration">Seconds</label><input type="number" id="duration" value="60" min="1"></div>
        <div><label for="voice">Brand voice</label><input type="text" id="voice" value="calm, confident, encouraging"></div>
        <label><input type="checkbox" id="autoPublish"> Auto publish</label>
        <button class="primary" id="createBtn">Start Job</button>
      </div>
      <p class="status" id="statusText">Ready.</p>
    </section>

    <section class="card">
      <table>
        <thead><tr><th>Topic</th><th>Status</th><th>Stages</th><th>Updated</th><th></th></tr></thead>
        <tbody id="jobRows"><tr><td colspan="5">No jobs yet.</td></tr></tbody>
      </table>
    </section>
  </main>

  <script>
    const STAGES = ["script", "video", "audio", "captions", "publish"];
    const statusText = document.getElementById("statusText");
    const jobRows = document.getElementById("jobRows");

    function setStatus(message, isError = false) {
      statusText.textContent = message;
      statusText.classList.toggle("error", isError);
    }

    function text(value) {
      const span = document.createElement("span");
      span.textContent = value;
      return span.innerHTML;
    }

    function stagePills(stages) {
      return STAGES.map((name) => {
        const stage = stages[name];
        const note = stage.error || stage.reason || "";
        return `<span class="pill ${stage.status}" title="${text(note)}">${name}: ${stage.status}</span>`;
      }).join(" ");
    }

    function canPublish(job) {
      const upstreamReady = STAGES.slice(0, 4).every((name) => job.stages[name].ready);
      const publish = job.stages.publish.status;
      return upstreamReady && publish !== "ready" && publish !== "running";
    }

    function renderJobs(jobs) {
      if (!jobs.length) {
        jobRows.innerHTML = '<tr><td colspan="5">No jobs yet.</td></tr>';
        return;
      }
      jobRows.innerHTML = jobs.map((job) => {
        return `<tr>
          <td>${text(job.idea.topic)}</td>
          <td><span class="pill ${job.status}">${job.status}</span></td>
          <td>${stagePills(job.stages)}</td>
          <td>${new Date(job.updatedAt).toLocaleTimeString()}</td>
          <td><button class="secondary" data-publish="${job.id}" ${canPublish(job) ? "" : "disabled"}>Publish</button></td>
        </tr>`;
      }).join("");
    }

    async function refresh() {
      try {
        const response = await fetch("/api/jobs");
        const data = await response.json();
        renderJobs(data.jobs);
      } catch (err) {
        setStatus(String(err.message || err), true);
      }
    }

    async function sendJson(url, body) {
      const response = await fetch(url, {
        method: "POST",
        headers: { "Content-Type": "application/json" },
        body: JSON.stringify(body),
      });
      const data = await response.json();
      if (!response.ok) {
        throw new Error(data.error || JSON.stringify(data));
      }
      return data;
    }

    document.getElementById("createBtn").addEventListener("click", async () => {
      try {
        const job = await sendJson("/api/jobs", {
          topic: document.getElementById("topic").value.trim(),
          durationSeconds: Number(document.getElementById("duration").value),
          brandVoice: document.getElementById("voice").value.trim(),
          autoPublish: document.getElementById("autoPublish").checked,
        });
        setStatus(`Job ${job.id} started.`);
        refresh();
      } catch (err) {
        setStatus(String(err.message || err), true);
      }
    });

    jobRows.addEventListener("click", async (event) => {
      const jobId = event.target.dataset.publish;
      if (!jobId) {
        return;
      }
      try {
        setStatus("Publishing...");
        const job = await sendJson(`/api/jobs/${jobId}/publish`, {});
        setStatus(`Job ${job.id} is ${job.status}.`);
        refresh();
      } catch (err) {
        setStatus(String(err.message || err), true);
      }
    });

    refresh();
    setInterval(refresh, 2000);
  </script>
</body>
</html>
"""


def render_homepage(*, app_name: str) -> str:
    return _PAGE.replace("__APP_NAME__", escape(app_name))
