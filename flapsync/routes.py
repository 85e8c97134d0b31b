from flask import Blueprint, current_app, jsonify, send_from_directory

main = Blueprint('main', __name__)


@main.route('/')
def index():
    return send_from_directory(current_app.static_folder, 'index.html')


@main.route('/health')
def health():
    return jsonify({'ok': True})
