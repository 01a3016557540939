from __future__ import annotations

from flask import Blueprint, Response

bp = Blueprint("chat_ui", __name__)


@bp.route("/", methods=["GET"])
@bp.route("/chat/ui", methods=["GET"])
def chat_ui() -> Response:
    html = _build_html_page()
    return Response(html, mimetype="text/html; charset=utf-8")


def _build_html_page() -> str:
    return """
<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <title>FCF Buddy</title>
    <style>
      :root {
        color-scheme: light dark;
        --primary: #1976d2;
        --primary-light: #1976d220;
        --border: #8883;
        --text-secondary: #666;
      }

      * { box-sizing: border-box; }

      body {
        margin: 0;
        font-family: system-ui, -apple-system, "Segoe UI", Roboto, Helvetica, Arial, sans-serif;
        background: #f5f5f5;
        color: #333;
      }

      @media (prefers-color-scheme: dark) {
        body { background: #1a1a1a; color: #e0e0e0; }
      }

      .wrap {
        max-width: 720px;
        margin: 0 auto;
        padding: 16px;
        height: 100vh;
        display: flex;
        flex-direction: column;
      }

      header {
        display: flex;
        align-items: center;
        justify-content: space-between;
        padding: 12px 0;
        border-bottom: 2px solid var(--primary);
        margin-bottom: 12px;
      }

      h1 { margin: 0; font-size: 22px; font-weight: 600; color: var(--primary); }

      .chat {
        flex: 1;
        border: 1px solid var(--border);
        border-radius: 12px;
        padding: 16px;
        overflow-y: auto;
        background: white;
      }

      @media (prefers-color-scheme: dark) {
        .chat { background: #2a2a2a; }
      }

      .top-avatar-container { text-align: center; margin-bottom: 8px; }
      .top-avatar { width: 96px; height: 96px; object-fit: contain; }

      .message.bot { display: flex; gap: 8px; margin: 12px 0; animation: slideIn 0.2s ease-out; }
      .bot-emoji { font-size: 22px; line-height: 1.4; }
      .bot-message-content {
        background: #f0f0f0;
        padding: 10px 14px;
        border-radius: 12px;
        border-bottom-left-radius: 4px;
        max-width: 85%;
      }
      .bot-message-content p { margin: 0 0 6px 0; }

      @media (prefers-color-scheme: dark) {
        .bot-message-content { background: #3a3a3a; }
      }

      .product-block { border-top: 1px solid var(--border); padding-top: 8px; margin-top: 8px; }
      .product-block h4 { margin: 0 0 4px 0; }
      .bot-image-container { display: flex; gap: 6px; flex-wrap: wrap; margin: 6px 0; }
      .product-image { max-width: 140px; border-radius: 8px; }
      .product-price { font-weight: 600; color: var(--primary); }

      .user-message { display: flex; justify-content: flex-end; margin: 12px 0; }
      .user-message-content {
        background: var(--primary);
        color: white;
        padding: 10px 14px;
        border-radius: 12px;
        border-bottom-right-radius: 4px;
        max-width: 75%;
        white-space: pre-wrap;
      }

      .options-container { display: flex; gap: 8px; flex-wrap: wrap; margin: 8px 0 8px 30px; }
      .option-btn {
        padding: 6px 12px;
        border-radius: 20px;
        border: 1px solid var(--primary);
        font-size: 14px;
        background: white;
        color: var(--primary);
        cursor: pointer;
        transition: all 0.2s;
      }
      .option-btn:hover { background: var(--primary); color: white; }

      .clear-btn {
        padding: 8px 12px;
        font-size: 13px;
        border-radius: 8px;
        background: transparent;
        border: 1px solid #ccc;
        color: var(--text-secondary);
        cursor: pointer;
      }

      .typing-indicator { display: inline-flex; gap: 4px; padding: 8px 12px; }
      .typing-indicator span {
        width: 8px; height: 8px; border-radius: 50%;
        background: var(--primary);
        animation: bounce 1.4s infinite ease-in-out both;
      }
      .typing-indicator span:nth-child(1) { animation-delay: -0.32s; }
      .typing-indicator span:nth-child(2) { animation-delay: -0.16s; }

      @keyframes slideIn {
        from { opacity: 0; transform: translateY(10px); }
        to { opacity: 1; transform: translateY(0); }
      }
      @keyframes bounce {
        0%, 80%, 100% { transform: scale(0); }
        40% { transform: scale(1); }
      }
    </style>
  </head>
  <body>
    <div class="wrap">
      <header>
        <h1>FCF Buddy</h1>
        <button id="clearChatBtn" class="clear-btn">Clear chat</button>
      </header>
      <div id="chatBox" class="chat"></div>
    </div>

    <script>
      const API = '/api/chat';
      const chatBox = document.getElementById('chatBox');
      const clearChatBtn = document.getElementById('clearChatBtn');
      let sessionId = null;
      let pollTimer = null;

      function scrollToBottom() {
        chatBox.scrollTop = chatBox.scrollHeight;
      }

      function botShell(avatar) {
        const messageDiv = document.createElement('div');
        messageDiv.className = 'message bot';
        const emoji = document.createElement('span');
        emoji.className = 'bot-emoji';
        emoji.textContent = avatar || '';
        const content = document.createElement('div');
        content.className = 'bot-message-content';
        messageDiv.appendChild(emoji);
        messageDiv.appendChild(content);
        return [messageDiv, content];
      }

      function renderAvatar(entry) {
        const div = document.createElement('div');
        div.className = 'top-avatar-container';
        const img = document.createElement('img');
        img.src = entry.image_url;
        img.alt = entry.alt;
        img.className = 'top-avatar';
        div.appendChild(img);
        return div;
      }

      function renderBot(entry) {
        const [messageDiv, content] = botShell(entry.avatar);
        const para = document.createElement('p');
        para.innerHTML = entry.html;  // trusted markup from the decision tree
        content.appendChild(para);
        (entry.products || []).forEach(product => {
          const block = document.createElement('div');
          block.className = 'product-block';
          const title = document.createElement('h4');
          title.textContent = product.title;
          block.appendChild(title);
          const desc = document.createElement('p');
          desc.textContent = product.description;
          block.appendChild(desc);
          if ((product.images || []).length) {
            const imgs = document.createElement('div');
            imgs.className = 'bot-image-container';
            product.images.forEach(src => {
              const img = document.createElement('img');
              img.src = src;
              img.alt = product.title;
              img.className = 'product-image';
              imgs.appendChild(img);
            });
            block.appendChild(imgs);
          }
          const price = document.createElement('p');
          price.className = 'product-price';
          price.textContent = product.price;
          block.appendChild(price);
          content.appendChild(block);
        });
        return messageDiv;
      }

      function renderOptions(entry) {
        const container = document.createElement('div');
        container.className = 'options-container';
        entry.options.forEach((option, index) => {
          const button = document.createElement('button');
          button.className = 'option-btn';
          button.innerHTML = option.label_html;
          button.setAttribute('data-next', option.next);
          button.addEventListener('click', () => selectOption(index));
          container.appendChild(button);
        });
        return container;
      }

      function renderUser(entry) {
        const div = document.createElement('div');
        div.className = 'user-message';
        const content = document.createElement('div');
        content.className = 'user-message-content';
        content.textContent = entry.text;
        div.appendChild(content);
        return div;
      }

      function renderError(entry) {
        const [messageDiv, content] = botShell(entry.avatar);
        const para = document.createElement('p');
        para.textContent = entry.text;
        content.appendChild(para);
        return messageDiv;
      }

      function renderTyping() {
        const div = document.createElement('div');
        div.className = 'message bot';
        div.innerHTML = '<div class="typing-indicator"><span></span><span></span><span></span></div>';
        return div;
      }

      const renderers = {
        avatar: renderAvatar,
        bot: renderBot,
        options: renderOptions,
        user: renderUser,
        error: renderError,
      };

      function renderEnvelope(envelope) {
        if (!envelope || !Array.isArray(envelope.entries)) return;
        sessionId = envelope.session_id || sessionId;
        chatBox.innerHTML = '';
        envelope.entries.forEach(entry => {
          const render = renderers[entry.type];
          if (render) chatBox.appendChild(render(entry));
        });
        if (envelope.pending) {
          chatBox.appendChild(renderTyping());
          schedulePoll(envelope.pending.delay_ms);
        }
        scrollToBottom();
      }

      function schedulePoll(delayMs) {
        if (pollTimer) clearTimeout(pollTimer);
        pollTimer = setTimeout(async () => {
          pollTimer = null;
          const res = await fetch(`${API}/session/${sessionId}`);
          if (res.ok) renderEnvelope(await res.json());
        }, Math.max(50, delayMs || 0));
      }

      async function startChat() {
        try {
          const res = await fetch(`${API}/session`, { method: 'POST' });
          const body = await res.json();
          renderEnvelope(body);
        } catch (error) {
          console.error('Error starting chat:', error);
          renderEnvelope({ entries: [{ type: 'error', avatar: '🤖',
            text: '⚠️ Unable to load chatbot data. Please refresh the page or contact support.' }] });
        }
      }

      async function selectOption(index) {
        if (!sessionId) return;
        const res = await fetch(`${API}/session/${sessionId}/select`, {
          method: 'POST',
          headers: { 'Content-Type': 'application/json' },
          body: JSON.stringify({ index }),
        });
        const body = await res.json();
        renderEnvelope(res.ok ? body : body.envelope);
      }

      async function clearChat() {
        if (pollTimer) { clearTimeout(pollTimer); pollTimer = null; }
        if (!sessionId) return startChat();
        const res = await fetch(`${API}/session/${sessionId}/reset`, { method: 'POST' });
        if (res.status === 404) return startChat();
        renderEnvelope(await res.json());
      }

      window.chatbotDebug = {
        getCurrentState: async () => (await (await fetch(`${API}/debug/${sessionId}`)).json()).current_state,
        getChatbotData: async () => (await (await fetch(`${API}/debug/tree`)).json()).tree,
        logState: async () => console.log(await (await fetch(`${API}/debug/${sessionId}`)).json()),
      };

      clearChatBtn.addEventListener('click', clearChat);
      document.addEventListener('DOMContentLoaded', startChat);
    </script>
  </body>
</html>
"""
