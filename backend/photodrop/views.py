"""
Paginas HTML del servicio: el formulario del concurso y el agradecimiento.

Cada funcion publica retorna un documento HTML completo. Todo valor
interpolado pasa por html.escape. El formulario envia multipart/form-data a
/upload con los campos "prenom" y "photo".
"""

from html import escape as _esc

from photodrop.config import settings

_FORM_STYLE = """
  body { font-family: system-ui, -apple-system, Segoe UI, Roboto, Arial; max-width: 640px; margin: 40px auto; padding: 0 16px; }
  form { display: grid; gap: 14px; }
  input, button { padding: 12px; font-size: 16px; border: 1px solid #ccc; border-radius: 12px; }
  button { cursor: pointer; }
  .submit { background-color: #ef5f60; color: white; border: none; border-radius: 10px; }
  .err { color: #b00020; background: #fff2f2; border: 1px solid #ffd0d0; padding: 12px; border-radius: 12px; margin-bottom: 10px; }
  .small { font-size: 13px; color: #555; }
  .sub { color: #8f8f8f; }
  .header { display: block; width: 100%; text-align: center; }
  .pick-grid { display: grid; gap: 12px; grid-template-columns: 1fr 1fr; }
  @media (max-width: 520px) { .pick-grid { grid-template-columns: 1fr; } }
  .file-label { padding: 14px; border: 1px dashed #ccc; border-radius: 12px; text-align: center; cursor: pointer; background: #fafafa; }
  .file-label:hover { background: #f0f0f0; }
  .preview { display: none; text-align: center; }
  .preview img { max-width: 100%; max-height: 280px; border-radius: 12px; border: 1px solid #ddd; }
"""

# Solo uno de los dos inputs de archivo debe llevar foto al enviar.
_FORM_SCRIPT = """
  const cam = document.getElementById("photo_camera");
  const lib = document.getElementById("photo_library");
  const fileName = document.getElementById("file-name");
  const preview = document.getElementById("preview");
  const img = document.getElementById("preview-img");

  function show(file) {
    fileName.textContent = file.name;
    const r = new FileReader();
    r.onload = e => { img.src = e.target.result; preview.style.display = "block"; };
    r.readAsDataURL(file);
  }

  cam.addEventListener("change", () => {
    if (cam.files.length) { lib.value = ""; show(cam.files[0]); }
  });
  lib.addEventListener("change", () => {
    if (lib.files.length) { cam.value = ""; show(lib.files[0]); }
  });
"""

_THANK_YOU_STYLE = """
  body { font-family: system-ui, -apple-system, Segoe UI, Roboto, Arial; max-width: 640px; margin: 0 auto; padding: 60px 16px; text-align: center; }
  .box { border: 1px solid #ddd; border-radius: 20px; padding: 40px 24px; }
  .emoji { font-size: 56px; margin-bottom: 12px; }
  h1 { margin-bottom: 12px; }
  p { color: #444; }
"""


def _page(title, style, body):
    return (
        '<!doctype html>\n'
        '<html lang="fr">\n<head>\n'
        '<meta charset="utf-8"/>\n'
        '<meta name="viewport" content="width=device-width, initial-scale=1"/>\n'
        f'<title>{_esc(title)}</title>\n'
        f'<style>{style}</style>\n'
        '</head>\n<body>\n'
        f'{body}\n'
        '</body>\n</html>'
    )


def _limits_note():
    max_mb = settings.MAX_FILE_SIZE // (1024 * 1024)
    return f"JPG / PNG · max {max_mb} MB · {settings.DAILY_QUOTA} photos / jour"


def render_form(error="", remaining=None):
    """Formulario, con banner de error opcional y fotos restantes del dia."""
    error_html = f'<div class="err">{_esc(error)}</div>' if error else ""
    remaining_html = ""
    if remaining is not None:
        remaining_html = f'<div class="small">Photos restantes aujourd’hui : {int(remaining)}</div>'

    accept = ",".join(settings.ALLOWED_MIME_TYPES)
    name_field = _esc(settings.NAME_FIELD)
    file_field = _esc(settings.FILE_FIELD)

    body = f"""
<div class="header">
  <h2>Jeu Concours 📸 Envoyez votre photo</h2>
</div>

{error_html}

<form method="post" action="/upload" enctype="multipart/form-data">
  <input name="{name_field}" placeholder="Votre prénom*" required />

  <div class="pick-grid">
    <label for="photo_camera" class="file-label">
      📷 <strong>Prendre une photo</strong><br/>
      <span class="small">Caméra (mobile)</span>
    </label>
    <label for="photo_library" class="file-label">
      🖼️ <strong>Choisir une image</strong><br/>
      <span class="small">Galerie / fichiers</span>
    </label>
  </div>

  <input id="photo_camera" type="file" name="{file_field}" accept="{accept}" capture="environment" hidden />
  <input id="photo_library" type="file" name="{file_field}" accept="{accept}" hidden />

  <div id="file-name" class="small"></div>
  <div id="preview" class="preview"><img id="preview-img"/></div>

  <div class="small">{_esc(_limits_note())}</div>
  {remaining_html}

  <button class="submit" type="submit">Envoyer</button>

  <p class="small sub">En soumettant votre photo, vous acceptez que celle-ci soit utilisée sur les réseaux sociaux, sur le site internet, ainsi que sur le flyer correspondant si vous êtes l'heureux gagnant.</p>
</form>

<script>{_FORM_SCRIPT}</script>
"""
    return _page("Envoyer une photo", _FORM_STYLE, body)


def render_thank_you():
    body = """
  <div class="box">
    <div class="emoji">🙏</div>
    <h1>Merci pour votre participation !</h1>
    <p>Votre photo a bien été envoyée.</p>
    <p>Bonne chance et à très bientôt 🙂</p>
  </div>
"""
    return _page("Merci", _THANK_YOU_STYLE, body)
