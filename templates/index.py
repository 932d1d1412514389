"""
HTML Template
=============

HTML template for the plank timer web interface.
"""

HTML_TEMPLATE = """
<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Plank Tracker</title>
    <style>
      * {
        box-sizing: border-box;
      }
      body {
        font-family: 'Segoe UI', system-ui, -apple-system, sans-serif;
        margin: 0;
        min-height: 100vh;
        background: #0f172a;
        color: #e2e8f0;
        display: flex;
        justify-content: center;
        align-items: center;
        padding: 1rem;
      }
      .panel {
        background: #1e293b;
        padding: 2rem;
        border-radius: 18px;
        box-shadow: 0 20px 45px rgba(15, 23, 42, 0.45);
        width: min(980px, 100%);
      }
      h1 {
        margin: 0 0 0.25rem;
        font-size: 1.8rem;
        color: #f8fafc;
      }
      .subtitle {
        color: #94a3b8;
        margin-bottom: 1.5rem;
      }
      .buttons {
        margin-bottom: 1rem;
        display: flex;
        gap: 0.75rem;
        flex-wrap: wrap;
      }
      button {
        border: none;
        padding: 0.65rem 1.3rem;
        border-radius: 999px;
        font-size: 0.95rem;
        font-weight: 600;
        cursor: pointer;
        background: #4c1d95;
        color: #f8fafc;
      }
      button.active {
        background: #ec4899;
      }
      #clock {
        font-size: 3rem;
        font-weight: 700;
        text-align: center;
        margin: 1.5rem 0;
      }
      video {
        width: 100%;
        max-height: 240px;
        border-radius: 12px;
        background: #020617;
      }
      .status {
        color: #22c55e;
      }
      .status.error {
        color: #ef4444;
      }
      ol {
        padding-left: 1.2rem;
      }
    </style>
  </head>
  <body>
    <div class="panel">
      <h1>Today's Plank</h1>
      <p class="subtitle">Hold it. Time it. Climb the 30-day leaderboard.</p>
      <div class="buttons">
        <button id="stopwatch" class="active" onclick="setMode('stopwatch')">Stopwatch</button>
        <button id="countdown" onclick="setMode('countdown')">Timer</button>
        <label>Min <input id="min" type="number" min="0" value="0" style="width:4rem"></label>
        <label>Sec <input id="sec" type="number" min="0" max="59" value="0" style="width:4rem"></label>
      </div>
      <label><input id="camera" type="checkbox" onchange="toggleCamera()"> Use Camera</label>
      <video id="video" autoplay playsinline muted hidden></video>
      <div id="clock">0:00</div>
      <label><input id="vow" type="checkbox"> I solemnly swear my plank is real.</label>
      <div class="buttons">
        <button onclick="start()">Start</button>
        <button onclick="call('pause')">Pause</button>
        <button onclick="call('finish')">Save plank</button>
        <button onclick="call('reset')">Reset</button>
      </div>
      <p id="status" class="status"></p>
      <h2>Last 30 Days' Total</h2>
      <ol id="leaderboard"></ol>
    </div>
    <script>
      let sessionId = null;
      let frameTimer = null;
      const token = localStorage.getItem('access_token');
      const headers = {'Content-Type': 'application/json'};
      if (token) headers['Authorization'] = 'Bearer ' + token;

      function fmt(t) {
        return Math.floor(t / 60) + ':' + String(t % 60).padStart(2, '0');
      }

      function show(data) {
        if (data.seconds !== undefined) {
          document.getElementById('clock').textContent = fmt(data.seconds);
        }
        const status = document.getElementById('status');
        (data.notifications || []).forEach(n => {
          status.textContent = n.message;
          status.className = n.level === 'error' ? 'status error' : 'status';
        });
        if (data.completed) loadLeaderboard();
      }

      async function post(path, body) {
        const res = await fetch('/sessions/' + sessionId + path, {
          method: 'POST', headers, body: JSON.stringify(body || {})
        });
        const data = await res.json();
        show(data);
        return data;
      }

      async function call(action) {
        return post('/' + action);
      }

      async function setMode(mode) {
        const data = await post('/mode', {mode});
        if (data.mode === mode) {
          document.getElementById('stopwatch').classList.toggle('active', mode === 'stopwatch');
          document.getElementById('countdown').classList.toggle('active', mode === 'countdown');
        }
      }

      async function start() {
        await post('/acknowledge', {acknowledged: document.getElementById('vow').checked});
        const mode = document.getElementById('countdown').classList.contains('active');
        if (mode) {
          await post('/target', {
            minutes: Number(document.getElementById('min').value),
            seconds: Number(document.getElementById('sec').value)
          });
        }
        await call('start');
      }

      async function toggleCamera() {
        const enabled = document.getElementById('camera').checked;
        const video = document.getElementById('video');
        await post('/camera', {enabled});
        if (enabled) {
          video.srcObject = await navigator.mediaDevices.getUserMedia({video: true});
          video.hidden = false;
          frameTimer = setInterval(sendFrame, 1000);
        } else {
          clearInterval(frameTimer);
          if (video.srcObject) video.srcObject.getTracks().forEach(t => t.stop());
          video.hidden = true;
        }
      }

      function sendFrame() {
        const video = document.getElementById('video');
        if (!video.videoWidth) return;
        const canvas = document.createElement('canvas');
        canvas.width = video.videoWidth;
        canvas.height = video.videoHeight;
        canvas.getContext('2d').drawImage(video, 0, 0);
        const image = canvas.toDataURL('image/jpeg', 0.85).split(',')[1];
        fetch('/sessions/' + sessionId + '/frame', {
          method: 'POST', headers, body: JSON.stringify({image})
        });
      }

      async function poll() {
        const res = await fetch('/sessions/' + sessionId, {headers});
        show(await res.json());
      }

      async function loadLeaderboard() {
        const res = await fetch('/leaderboard');
        const data = await res.json();
        document.getElementById('leaderboard').innerHTML = data.total
          .map(e => '<li>' + e.full_name + ' ' + e.time + '</li>').join('');
        show({notifications: data.notifications});
      }

      (async () => {
        const res = await fetch('/sessions', {method: 'POST', headers, body: '{}'});
        sessionId = (await res.json()).session_id;
        setInterval(poll, 1000);
        loadLeaderboard();
      })();
    </script>
  </body>
</html>
"""
